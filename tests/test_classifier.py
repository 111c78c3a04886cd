"""Which event/action pairs get a notification."""

import pytest

from conftest import comment_payload, pull_request_payload, review_payload
from pr_notify.services.github import is_valid_event


@pytest.mark.parametrize("action", ["opened", "reopened", "closed"])
def test_pull_request_accepted(action):
    assert is_valid_event("pull_request", pull_request_payload(action)) is True


@pytest.mark.parametrize("action", ["synchronize", "labeled", "edited", "assigned"])
def test_pull_request_other_actions_rejected(action):
    assert is_valid_event("pull_request", pull_request_payload(action)) is False


@pytest.mark.parametrize("action", ["submitted", "dismissed"])
def test_review_accepted(action):
    assert is_valid_event("pull_request_review", review_payload(action)) is True


def test_review_edit_with_body_change_accepted():
    payload = review_payload("edited", changes={"body": {"from": "old"}})
    assert is_valid_event("pull_request_review", payload) is True


def test_review_edit_without_body_change_rejected():
    assert is_valid_event("pull_request_review", review_payload("edited", changes={})) is False
    assert is_valid_event("pull_request_review", review_payload("edited")) is False


@pytest.mark.parametrize("action", ["created", "edited"])
def test_pull_request_comment_accepted(action):
    assert is_valid_event("issue_comment", comment_payload(action)) is True


@pytest.mark.parametrize("action", ["created", "edited", "deleted"])
def test_plain_issue_comment_rejected(action):
    payload = comment_payload(action, on_pull_request=False)
    assert is_valid_event("issue_comment", payload) is False


def test_comment_deleted_rejected():
    assert is_valid_event("issue_comment", comment_payload("deleted")) is False


def test_missing_action_rejected():
    payload = pull_request_payload()
    del payload["action"]
    assert is_valid_event("pull_request", payload) is False


@pytest.mark.parametrize("event_name", ["push", "issues", "pull_request_review_comment", ""])
def test_other_events_rejected(event_name):
    assert is_valid_event(event_name, {"action": "opened"}) is False


def test_empty_payload_rejected():
    assert is_valid_event("pull_request", {}) is False
    assert is_valid_event("pull_request", None) is False


def test_review_edit_with_empty_body_change_accepted():
    payload = review_payload("edited", changes={"body": {}})
    assert is_valid_event("pull_request_review", payload) is True
