"""
Checks that the subnets a task is placed in belong to the expected VPC.
"""
import logging
from typing import Mapping, Optional, Sequence

from boto3.session import Session

from event_target_sync.errors import SubnetVpcMismatchError

logger = logging.getLogger(__name__)


def find_foreign_subnet(
    subnet_ids: Sequence[str], subnet_vpc_map: Mapping[str, str], vpc_id: str
) -> Optional[str]:
    """Returns the first subnet, in list order, that is not part of vpc_id."""
    for subnet_id in subnet_ids:
        if subnet_vpc_map.get(subnet_id) != vpc_id:
            return subnet_id
    return None


def validate_subnets(session: Session, vpc_id: str, subnet_ids: Sequence[str]) -> None:
    """
    Looks up all subnets in one DescribeSubnets call and raises
    SubnetVpcMismatchError for the first one owned by another VPC.
    """
    logger.info("Checking networking configuration")
    ec2 = session.client("ec2")
    resp = ec2.describe_subnets(SubnetIds=list(subnet_ids))
    subnet_vpc_map = {s["SubnetId"]: s.get("VpcId") for s in resp.get("Subnets", [])}

    invalid = find_foreign_subnet(subnet_ids, subnet_vpc_map, vpc_id)
    if invalid:
        raise SubnetVpcMismatchError(invalid, vpc_id)
    logger.info("Passed network config validation")
