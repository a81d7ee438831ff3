"""
Module for waiting on a CloudFormation stack until it reaches a stable status.
"""
import logging
import time
from typing import Callable

from boto3.session import Session

from event_target_sync.errors import (
    StackWaitTimeoutError,
    UnknownStackStatusError,
    UnsafeStackStatusError,
)

logger = logging.getLogger(__name__)

WAIT_REQUIRED_CF_STATUS = frozenset({
    "CREATE_IN_PROGRESS",
    "ROLLBACK_IN_PROGRESS",
    "UPDATE_IN_PROGRESS",
    "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS",
    "UPDATE_ROLLBACK_IN_PROGRESS",
    "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS",
    "REVIEW_IN_PROGRESS",
    "IMPORT_IN_PROGRESS",
    "IMPORT_ROLLBACK_IN_PROGRESS",
})

FAILED_CF_STATUS = frozenset({
    "CREATE_FAILED",
    "ROLLBACK_FAILED",
    "ROLLBACK_COMPLETE",
    "DELETE_IN_PROGRESS",
    "DELETE_FAILED",
    "DELETE_COMPLETE",
    "UPDATE_ROLLBACK_FAILED",
    "IMPORT_ROLLBACK_FAILED",
})

SETTLED_CF_STATUS = frozenset({
    "CREATE_COMPLETE",
    "UPDATE_COMPLETE",
    "UPDATE_ROLLBACK_COMPLETE",
    "IMPORT_COMPLETE",
    "IMPORT_ROLLBACK_COMPLETE",
})

DEFAULT_MAX_ATTEMPTS = 300
DEFAULT_POLL_INTERVAL = 1.0


class StackPoller:
    """
    Polls a CloudFormation stack until it leaves an in-progress status.

    Stacks in a failed or deleted status abort immediately, as does any
    status this module does not recognise. Running out of attempts while
    the stack is still busy is an error too.
    """
    def __init__(
        self,
        session: Session,
        stack_name: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.stack_name = stack_name
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.client = session.client("cloudformation")

    def current_status(self) -> str:
        stack = self.client.describe_stacks(StackName=self.stack_name)["Stacks"][0]
        return stack["StackStatus"]

    def wait_until_settled(self) -> str:
        """
        Blocks until the stack is settled and returns its final status.
        Raises:
            UnsafeStackStatusError: the stack is failed, rolled back or being deleted.
            UnknownStackStatusError: the stack reported a status outside every known set.
            StackWaitTimeoutError: the stack was still in progress after max_attempts polls.
        """
        status = ""
        for attempt in range(1, self.max_attempts + 1):
            status = self.current_status()
            if status in WAIT_REQUIRED_CF_STATUS:
                logger.info("Stack is in-progress status (%s). Waiting...", status)
                if attempt < self.max_attempts:
                    self.sleep(self.poll_interval)
            elif status in FAILED_CF_STATUS:
                raise UnsafeStackStatusError(status)
            elif status in SETTLED_CF_STATUS:
                logger.info("Stack %s is settled with status %s", self.stack_name, status)
                return status
            else:
                raise UnknownStackStatusError(status)
        raise StackWaitTimeoutError(self.stack_name, self.max_attempts, status)
