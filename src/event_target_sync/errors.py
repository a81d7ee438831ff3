"""
Errors raised by the update pipeline. Every one of them aborts the run.
"""


class TargetSyncError(RuntimeError):
    """Base class for expected, reportable failures."""


class UnsafeStackStatusError(TargetSyncError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Detected unexpected stack status {status}: Exiting for safety.")


class UnknownStackStatusError(TargetSyncError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Stack reached unrecognised status {status}: Exiting for safety.")


class StackWaitTimeoutError(TargetSyncError):
    def __init__(self, stack_name: str, attempts: int, status: str):
        self.stack_name = stack_name
        self.attempts = attempts
        self.status = status
        super().__init__(
            f"Stack {stack_name} still in status {status} after {attempts} attempts"
        )


class MissingOutputError(TargetSyncError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Failed to find required key {key} from stack output")


class EmptySubnetListError(TargetSyncError):
    def __init__(self):
        super().__init__("Failed to find Subnet Ids from stack output")


class SubnetVpcMismatchError(TargetSyncError):
    def __init__(self, subnet_id: str, vpc_id: str):
        self.subnet_id = subnet_id
        self.vpc_id = vpc_id
        super().__init__(f"Subnet {subnet_id} is not part of VPC {vpc_id}")


class MissingEventTargetError(TargetSyncError):
    def __init__(self, rule_name: str, target_id: str):
        self.rule_name = rule_name
        self.target_id = target_id
        super().__init__(
            f"Failed to find Cloudwatch Event Rule Target {target_id} "
            f"which is associated with Rule {rule_name}"
        )


class TargetUpdateError(TargetSyncError):
    def __init__(self, rule_name: str, failed_entries: list):
        self.rule_name = rule_name
        self.failed_entries = failed_entries
        details = ", ".join(
            f"{e.get('TargetId')}: {e.get('ErrorCode')} {e.get('ErrorMessage')}"
            for e in failed_entries
        )
        super().__init__(f"Failed to update targets of Rule {rule_name}: {details}")
