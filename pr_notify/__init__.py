"""GitHub pull request → Slack notifier."""

__version__ = "1.0.0"
