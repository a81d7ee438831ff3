"""
Replaces the ECS target of a scheduled CloudWatch Events rule.
"""
import json
import logging
import time
from typing import Callable, Optional

from boto3.session import Session

from event_target_sync.cfn.stack_outputs import StackOutputs
from event_target_sync.errors import MissingEventTargetError, TargetUpdateError

logger = logging.getLogger(__name__)

LAUNCH_TYPE = "FARGATE"
TASK_COUNT = 1
ASSIGN_PUBLIC_IP = "ENABLED"
DEFAULT_CONFIRM_DELAY = 10.0


def build_target(current_target: dict, outputs: StackOutputs) -> dict:
    """
    Builds a full replacement for current_target that launches the stack's
    task definition on Fargate. Only the target Id is carried over.
    """
    return {
        "Id": current_target["Id"],
        "Arn": outputs.ecs_cluster,
        "RoleArn": outputs.event_role_arn,
        "EcsParameters": {
            "TaskDefinitionArn": outputs.ecs_task_definition,
            "TaskCount": TASK_COUNT,
            "LaunchType": LAUNCH_TYPE,
            "NetworkConfiguration": {
                "awsvpcConfiguration": {
                    "Subnets": list(outputs.subnet_ids),
                    "AssignPublicIp": ASSIGN_PUBLIC_IP,
                    "SecurityGroups": [outputs.security_group_id],
                }
            },
        },
    }


class EventTargetUpdater:
    """
    Reads the targets of an event rule and swaps the one matching the task
    name for a freshly built ECS target.
    """
    def __init__(
        self,
        session: Session,
        rule_name: str,
        confirm_delay: float = DEFAULT_CONFIRM_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.rule_name = rule_name
        self.confirm_delay = confirm_delay
        self.sleep = sleep
        self.client = session.client("events")

    def _find_target(self, target_id: str) -> Optional[dict]:
        paginator = self.client.get_paginator("list_targets_by_rule")
        for page in paginator.paginate(Rule=self.rule_name):
            for target in page.get("Targets", []):
                if target.get("Id") == target_id:
                    return target
        return None

    def find_target(self, target_id: str) -> dict:
        target = self._find_target(target_id)
        if target is None:
            raise MissingEventTargetError(self.rule_name, target_id)
        return target

    def update(self, outputs: StackOutputs) -> dict:
        """
        Replaces the rule's target whose Id equals outputs.task_name and
        returns the submitted target. Nothing is submitted if no target matches.
        """
        logger.info("Reading current Target configuration of Cloudwatch Event Rule...")
        current = self.find_target(outputs.task_name)
        target = build_target(current, outputs)
        logger.info("Generated Target: %s", json.dumps(target, indent=2))

        if self.confirm_delay > 0:
            logger.info("Waiting for %g sec for confirmation.", self.confirm_delay)
            self.sleep(self.confirm_delay)

        logger.info("Updating target...")
        resp = self.client.put_targets(Rule=self.rule_name, Targets=[target])
        if resp.get("FailedEntryCount", 0):
            raise TargetUpdateError(self.rule_name, resp.get("FailedEntries", []))
        logger.info("Successfully updated target of Rule %s", self.rule_name)
        return target
