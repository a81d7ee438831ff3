from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from event_target_sync._main import create_session, main, main_logic, parse_args


def _wire_happy_path(clients, stack_response):
    clients["cloudformation"].describe_stacks.return_value = stack_response("UPDATE_COMPLETE")
    clients["ec2"].describe_subnets.return_value = {
        "Subnets": [
            {"SubnetId": "subnet-1", "VpcId": "vpc-123"},
            {"SubnetId": "subnet-2", "VpcId": "vpc-123"},
        ]
    }
    paginator = Mock()
    paginator.paginate.return_value = [{"Targets": [{"Id": "nightly-report", "Arn": "arn:old"}]}]
    clients["events"].get_paginator.return_value = paginator
    clients["events"].put_targets.return_value = {"FailedEntryCount": 0, "FailedEntries": []}


def test_parse_args_defaults():
    args = parse_args(["reports"])
    assert args.stack_name == "reports"
    assert args.max_attempts == 300
    assert args.poll_interval == 1.0
    assert args.confirm_delay == 10.0
    assert args.region is None


def test_missing_stack_name_exits_1(session):
    assert main([], session=session) == 1
    session.client.assert_not_called()


def test_main_logic_end_to_end(session, clients, stack_response, fake_sleep, sleeps):
    _wire_happy_path(clients, stack_response)

    target = main_logic(parse_args(["reports"]), session, sleep=fake_sleep)

    assert sleeps == [10.0]
    events = clients["events"]
    events.put_targets.assert_called_once_with(Rule="nightly-report-schedule", Targets=[target])
    ecs = target["EcsParameters"]
    assert ecs["LaunchType"] == "FARGATE"
    assert ecs["TaskCount"] == 1
    assert ecs["NetworkConfiguration"]["awsvpcConfiguration"]["AssignPublicIp"] == "ENABLED"


def test_main_exits_0_on_success(session, clients, stack_response):
    _wire_happy_path(clients, stack_response)
    assert main(["reports", "--confirm-delay", "0"], session=session) == 0
    clients["events"].put_targets.assert_called_once()


def test_main_exits_1_on_unsafe_stack(session, clients, stack_response):
    clients["cloudformation"].describe_stacks.return_value = stack_response("DELETE_IN_PROGRESS")
    assert main(["reports", "--confirm-delay", "0"], session=session) == 1
    clients["events"].put_targets.assert_not_called()


def test_main_exits_1_on_subnet_mismatch(session, clients, stack_response):
    _wire_happy_path(clients, stack_response)
    clients["ec2"].describe_subnets.return_value = {
        "Subnets": [
            {"SubnetId": "subnet-1", "VpcId": "vpc-123"},
            {"SubnetId": "subnet-2", "VpcId": "vpc-other"},
        ]
    }
    assert main(["reports", "--confirm-delay", "0"], session=session) == 1
    clients["events"].put_targets.assert_not_called()


def test_main_exits_1_on_unexpected_error(session, clients, caplog):
    clients["cloudformation"].describe_stacks.side_effect = ClientError(
        {"Error": {"Code": "ValidationError", "Message": "Stack with id reports does not exist"}},
        "DescribeStacks",
    )
    assert main(["reports"], session=session) == 1
    assert "Got unexpected error" in caplog.text
    assert "Failed to update cloudwatch event!" in caplog.text


def test_create_session_passes_profile_and_region(monkeypatch):
    calls = {}

    def fake_session(**kwargs):
        calls.update(kwargs)
        return Mock()

    monkeypatch.setattr("boto3.session.Session", fake_session)
    create_session(region="eu-west-1", profile="deploy")
    assert calls == {"profile_name": "deploy", "region_name": "eu-west-1"}


def test_interrupt_during_confirmation_exits_1(session, clients, stack_response, caplog):
    _wire_happy_path(clients, stack_response)

    def interrupt(seconds):
        raise KeyboardInterrupt

    assert main(["reports"], session=session, sleep=interrupt) == 1
    clients["events"].put_targets.assert_not_called()
    assert "Interrupted" in caplog.text


@pytest.mark.parametrize("value", ["0", "-3", "many"])
def test_max_attempts_rejects_non_positive(session, value):
    with pytest.raises(SystemExit) as exc:
        main(["reports", "--max-attempts", value, "--confirm-delay", "0"], session=session)
    assert exc.value.code == 1
    session.client.assert_not_called()


def test_log_level_is_case_insensitive():
    assert parse_args(["reports", "--log-level", "debug"]).log_level == "DEBUG"


def test_unknown_log_level_exits_1(session):
    with pytest.raises(SystemExit) as exc:
        main(["reports", "--log-level", "verbose"], session=session)
    assert exc.value.code == 1
    session.client.assert_not_called()
