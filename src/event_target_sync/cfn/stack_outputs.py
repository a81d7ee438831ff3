"""
Reads the outputs of a settled CloudFormation stack into a typed record.
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Dict, List, Mapping, Optional, Tuple

from boto3.session import Session

from event_target_sync.errors import EmptySubnetListError, MissingOutputError

logger = logging.getLogger(__name__)


def parse_subnet_ids(raw: Optional[str]) -> List[str]:
    """Splits a comma separated subnet list, dropping blank entries."""
    if not raw:
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


def outputs_to_dict(stack: Mapping) -> Dict[str, str]:
    return {o["OutputKey"]: o["OutputValue"] for o in stack.get("Outputs", [])}


@dataclass(frozen=True)
class StackOutputs:
    """
    The stack outputs the event target is built from. Each field carries the
    name of the output key it is read from in its metadata.
    """
    task_name: str = field(metadata={"output_key": "TaskName"})
    ecs_cluster: str = field(metadata={"output_key": "ECSCluster"})
    ecs_task_definition: str = field(metadata={"output_key": "ECSTaskDefinition"})
    vpc_id: str = field(metadata={"output_key": "VpcId"})
    subnet_ids: Tuple[str, ...] = field(metadata={"output_key": "SubnetIds"})
    security_group_id: str = field(metadata={"output_key": "SecurityGroupId"})
    event_rule_name: str = field(metadata={"output_key": "CloudwatchEventRuleName"})
    event_role_arn: str = field(metadata={"output_key": "CloudwatchEventRole"})

    @classmethod
    def from_outputs(cls, outputs: Mapping[str, str]) -> "StackOutputs":
        """
        Builds the record from an OutputKey -> OutputValue mapping.
        Raises:
            MissingOutputError: naming the first required key that is absent or empty.
            EmptySubnetListError: SubnetIds holds nothing but separators and blanks.
        """
        values = {}
        missing = []
        for f in fields(cls):
            key = f.metadata["output_key"]
            raw = outputs.get(key)
            if key == "SubnetIds":
                # A separator-only value is caught by the subnet check below.
                values[f.name] = tuple(parse_subnet_ids(raw))
            else:
                values[f.name] = raw
            if not raw:
                logger.error("Failed to find required key %s from stack output", key)
                missing.append(key)
        if missing:
            raise MissingOutputError(missing[0])
        if not values["subnet_ids"]:
            raise EmptySubnetListError()
        return cls(**values)

    def log_summary(self, stack_name: str) -> None:
        logger.info("Got Outputs from Stack %s", stack_name)
        logger.info("=====================================")
        logger.info("VPC Id: %s", self.vpc_id)
        logger.info("Subnet Ids: %s", " ".join(self.subnet_ids))
        logger.info("Security Group Id: %s", self.security_group_id)
        logger.info("Cloudwatch Event Rule Name: %s", self.event_rule_name)


def fetch_stack_outputs(session: Session, stack_name: str) -> StackOutputs:
    cfn = session.client("cloudformation")
    stack = cfn.describe_stacks(StackName=stack_name)["Stacks"][0]
    return StackOutputs.from_outputs(outputs_to_dict(stack))
