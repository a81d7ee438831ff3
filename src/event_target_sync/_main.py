import argparse
import logging
import sys
import time
from typing import Callable, Optional

import boto3

from event_target_sync.cfn.stack_outputs import fetch_stack_outputs
from event_target_sync.cfn.stack_poller import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    StackPoller,
)
from event_target_sync.errors import TargetSyncError
from event_target_sync.events.target_updater import DEFAULT_CONFIRM_DELAY, EventTargetUpdater
from event_target_sync.network.subnets import validate_subnets

logger = logging.getLogger("event_target_sync")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure."""
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv=None):
    parser = _ArgumentParser(
        prog="update-event-target",
        description="Point a CloudWatch Events rule at the ECS task definition of a CloudFormation stack",
    )
    parser.add_argument("stack_name", nargs="?", help="CloudFormation stack name")
    parser.add_argument("--region", default=None, help="AWS region (default: boto3 configuration)")
    parser.add_argument("--profile", default=None, help="AWS profile name")
    parser.add_argument(
        "--max-attempts", type=positive_int, default=DEFAULT_MAX_ATTEMPTS,
        help=f"Stack status polls before giving up (default: {DEFAULT_MAX_ATTEMPTS})"
    )
    parser.add_argument(
        "--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between stack status polls (default: {DEFAULT_POLL_INTERVAL:g})"
    )
    parser.add_argument(
        "--confirm-delay", type=float, default=DEFAULT_CONFIRM_DELAY,
        help=f"Seconds to wait before submitting the new target (default: {DEFAULT_CONFIRM_DELAY:g})"
    )
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO",
        help="Logging level (default: INFO)"
    )
    return parser.parse_args(argv)


def create_session(region: Optional[str] = None, profile: Optional[str] = None) -> boto3.session.Session:
    if profile:
        return boto3.session.Session(profile_name=profile, region_name=region)
    return boto3.session.Session(region_name=region)


def main_logic(args, session: boto3.session.Session, sleep: Callable[[float], None] = time.sleep) -> dict:
    logger.info("Checking stack %s", args.stack_name)
    StackPoller(
        session,
        args.stack_name,
        max_attempts=args.max_attempts,
        poll_interval=args.poll_interval,
        sleep=sleep,
    ).wait_until_settled()

    outputs = fetch_stack_outputs(session, args.stack_name)
    outputs.log_summary(args.stack_name)

    validate_subnets(session, outputs.vpc_id, outputs.subnet_ids)

    updater = EventTargetUpdater(
        session, outputs.event_rule_name, confirm_delay=args.confirm_delay, sleep=sleep
    )
    return updater.update(outputs)


def main(
    argv=None,
    session: Optional[boto3.session.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(message)s")

    if not args.stack_name:
        logger.error("Missing stack name")
        return 1

    try:
        if session is None:
            session = create_session(region=args.region, profile=args.profile)
        main_logic(args, session, sleep=sleep)
    except TargetSyncError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted before the target was updated.")
        return 1
    except Exception as e:
        logger.error("Got unexpected error: %s", e)
        logger.error("Failed to update cloudwatch event!")
        return 1

    logger.info("Successfully updated target. exiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
