"""Workflow run context handed over by the Actions runner."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class EventContext:
    """The triggering event plus the repository it happened in."""

    event_name: str
    payload: dict[str, Any] = field(default_factory=dict)
    owner: str = ""
    repo: str = ""
    api_url: str = DEFAULT_API_URL

    @property
    def action(self) -> str:
        return self.payload.get("action") or ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EventContext":
        """
        Build the context from ``GITHUB_EVENT_NAME``, ``GITHUB_EVENT_PATH``,
        ``GITHUB_REPOSITORY`` and ``GITHUB_API_URL``.

        A missing event file gives an empty payload, which the classifier
        rejects.
        """
        env = os.environ if environ is None else environ
        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path and Path(event_path).is_file():
            payload = json.loads(Path(event_path).read_text(encoding="utf-8"))

        full_name = env.get("GITHUB_REPOSITORY") or (
            (payload.get("repository") or {}).get("full_name") or ""
        )
        owner, _, repo = full_name.partition("/")

        return cls(
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            payload=payload,
            owner=owner,
            repo=repo,
            api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "eventName": self.event_name,
            "repo": {"owner": self.owner, "repo": self.repo},
            "apiUrl": self.api_url,
            "payload": self.payload,
        }
