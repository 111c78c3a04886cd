"""Errors raised while resolving inputs or delivering a notification."""

from __future__ import annotations


class NotifierError(Exception):
    """Base class for every failure the action reports."""


class ConfigError(NotifierError):
    """Action inputs are missing or malformed."""


class GitHubAPIError(NotifierError):
    """GitHub REST API answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"GitHub error: {status_code} {body}")


class SlackWebhookError(NotifierError):
    """Slack incoming webhook rejected the message."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Slack webhook error: {status_code} {body}")
