"""Action inputs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Mapping

from dotenv import load_dotenv

from pr_notify.errors import ConfigError

load_dotenv()

# input name -> (plain fallback variable, default)
INPUTS: dict[str, tuple[str, str]] = {
    "github-token": ("GITHUB_TOKEN", ""),
    "slack-bot-token": ("SLACK_BOT_TOKEN", ""),
    "slack-channel-id": ("SLACK_CHANNEL_ID", ""),
    "slack-webhook-url": ("SLACK_WEBHOOK_URL", ""),
    "user-mapping": ("USER_MAPPING", ""),
}


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str:
    """
    Read an action input the way the Actions runner exports it.

    The runner sets ``INPUT_<NAME>`` with spaces replaced and hyphens kept
    (``INPUT_SLACK-BOT-TOKEN``). The underscore spelling and a plain variable
    (``SLACK_BOT_TOKEN``) are accepted too, for local runs and ``.env`` files.
    """
    env = os.environ if environ is None else environ
    key = name.replace(" ", "_").upper()
    fallback, default = INPUTS.get(name, ("", ""))
    for candidate in (f"INPUT_{key}", f"INPUT_{key.replace('-', '_')}", fallback):
        if not candidate:
            continue
        value = env.get(candidate)
        if value is not None and value.strip():
            return value.strip()
    return default


def format_user_mapping(mapping: str) -> dict[str, str]:
    """
    Convert a json string to ``{<GitHub username>: <Slack member ID>}``.

    Entries with an empty member ID are dropped.

    Raises
    ------
    ConfigError
        If ``mapping`` is not a json object.
    """
    try:
        data = json.loads(mapping)
    except (TypeError, ValueError) as exc:
        raise ConfigError('Input "user-mapping" must be a json string.') from exc
    if not isinstance(data, dict):
        raise ConfigError('Input "user-mapping" must be a json string.')
    return {str(k): str(v) for k, v in data.items() if v}


@dataclass(frozen=True)
class Inputs:
    """Action inputs"""

    github_token: str = ""
    bot_token: str = ""
    channel_id: str = ""
    webhook_url: str = ""
    user_mapping: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Inputs":
        return cls(
            github_token=get_input("github-token", environ),
            bot_token=get_input("slack-bot-token", environ),
            channel_id=get_input("slack-channel-id", environ),
            webhook_url=get_input("slack-webhook-url", environ),
            user_mapping=format_user_mapping(
                get_input("user-mapping", environ) or "{}"
            ),
        )

    def validate(self) -> None:
        if not self.bot_token and not self.webhook_url:
            raise ConfigError(
                'Need to provide at least one input "slack-bot-token" or "slack-webhook-url".'
            )
        if self.bot_token and not self.channel_id:
            raise ConfigError(
                'Input "slack-channel-id" is required to run this action. '
                "An empty one has been provided."
            )
