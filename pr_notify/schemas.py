"""Webhook payload schemas"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Payload(BaseModel):
    """
    Base for the payload models.
    Only fields used by this action are declared; the rest is ignored.
    """

    model_config = ConfigDict(extra="ignore")


class User(Payload):
    login: str
    avatar_url: Optional[str] = None


class Reviewer(Payload):
    """A requested reviewer: a user (has ``login``) or a team (has ``slug``)."""

    login: Optional[str] = None
    slug: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_user(self) -> bool:
        return self.login is not None


class Label(Payload):
    name: str


class Repository(Payload):
    full_name: Optional[str] = None
    html_url: Optional[str] = None


class Branch(Payload):
    ref: str
    repo: Optional[Repository] = None


class PullRequest(Payload):
    number: int
    title: str = ""
    html_url: str = ""
    merged: bool = False
    changed_files: Optional[int] = None
    head: Optional[Branch] = None
    base: Optional[Branch] = None
    user: Optional[User] = None
    labels: list[Label] = Field(default_factory=list)
    requested_reviewers: list[Reviewer] = Field(default_factory=list)

    @field_validator("labels", "requested_reviewers", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("merged", mode="before")
    @classmethod
    def _null_merged(cls, value: Any) -> Any:
        return False if value is None else value


class Issue(Payload):
    number: int
    title: str = ""
    html_url: str = ""
    labels: list[Label] = Field(default_factory=list)
    pull_request: Optional[dict[str, Any]] = None

    @field_validator("labels", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value


class Comment(Payload):
    html_url: str = ""


class Review(Payload):
    html_url: str = ""
    state: Optional[str] = None


class Event(Payload):
    action: str
    sender: Optional[User] = None
    repository: Optional[Repository] = None


class PullRequestEvent(Event):
    number: int
    pull_request: PullRequest


class IssueCommentEvent(Event):
    issue: Issue
    comment: Comment


class PullRequestReviewEvent(Event):
    pull_request: PullRequest
    review: Review
    changes: Optional[dict[str, Any]] = None


AnyEvent = Union[PullRequestEvent, IssueCommentEvent, PullRequestReviewEvent]

EVENT_MODELS: dict[str, type[Event]] = {
    "pull_request": PullRequestEvent,
    "issue_comment": IssueCommentEvent,
    "pull_request_review": PullRequestReviewEvent,
}


def parse_event(event_name: str, payload: dict[str, Any]) -> Optional[AnyEvent]:
    """Validate ``payload`` against the model for ``event_name`` (None if unknown)."""
    model = EVENT_MODELS.get(event_name)
    if model is None:
        return None
    return model.model_validate(payload)
