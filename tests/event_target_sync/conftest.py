from unittest.mock import Mock

import pytest


STACK_OUTPUTS = {
    "TaskName": "nightly-report",
    "ECSCluster": "arn:aws:ecs:us-east-1:123456789012:cluster/reports",
    "ECSTaskDefinition": "arn:aws:ecs:us-east-1:123456789012:task-definition/nightly-report:7",
    "VpcId": "vpc-123",
    "SubnetIds": "subnet-1, subnet-2",
    "SecurityGroupId": "sg-1",
    "CloudwatchEventRuleName": "nightly-report-schedule",
    "CloudwatchEventRole": "arn:aws:iam::123456789012:role/events-run-task",
}


def _stack_response(status="UPDATE_COMPLETE", outputs=None):
    outputs = STACK_OUTPUTS if outputs is None else outputs
    return {
        "Stacks": [
            {
                "StackName": "reports",
                "StackStatus": status,
                "Outputs": [{"OutputKey": k, "OutputValue": v} for k, v in outputs.items()],
            }
        ]
    }


@pytest.fixture
def clients():
    return {"cloudformation": Mock(), "ec2": Mock(), "events": Mock()}


@pytest.fixture
def session(clients):
    session = Mock()
    session.client.side_effect = lambda name, **kwargs: clients[name]
    return session


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def stack_response():
    return _stack_response


@pytest.fixture
def raw_outputs():
    return dict(STACK_OUTPUTS)
