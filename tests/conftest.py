"""Shared payload builders."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

REPO_URL = "https://github.com/acme/widgets"
PR_URL = f"{REPO_URL}/pull/7"


def make_pull_request(**overrides: Any) -> dict[str, Any]:
    pr = {
        "number": 7,
        "title": "Add feature X",
        "html_url": PR_URL,
        "merged": False,
        "changed_files": 3,
        "head": {"ref": "feature-x", "repo": {"html_url": REPO_URL}},
        "base": {"ref": "main", "repo": {"html_url": REPO_URL}},
        "user": {"login": "alice", "avatar_url": "https://avatars/alice"},
        "labels": [{"name": "bug"}],
        "requested_reviewers": [],
    }
    pr.update(overrides)
    return pr


def make_sender(login: str = "bob") -> dict[str, Any]:
    return {"login": login, "avatar_url": f"https://avatars/{login}"}


def pull_request_payload(action: str = "opened", **pr_overrides: Any) -> dict[str, Any]:
    return {
        "action": action,
        "number": 7,
        "pull_request": make_pull_request(**pr_overrides),
        "repository": {"full_name": "acme/widgets", "html_url": REPO_URL},
        "sender": make_sender(),
    }


def review_payload(
    action: str = "submitted", state: str = "approved", **extra: Any
) -> dict[str, Any]:
    payload = {
        "action": action,
        "pull_request": make_pull_request(changed_files=None),
        "review": {"state": state, "html_url": f"{PR_URL}#pullrequestreview-1"},
        "repository": {"full_name": "acme/widgets", "html_url": REPO_URL},
        "sender": make_sender(),
    }
    payload.update(extra)
    return payload


def comment_payload(action: str = "created", *, on_pull_request: bool = True) -> dict[str, Any]:
    issue: dict[str, Any] = {
        "number": 7,
        "title": "Add feature X",
        "html_url": PR_URL,
        "labels": [{"name": "bug"}],
    }
    if on_pull_request:
        issue["pull_request"] = {"url": "https://api.github.com/repos/acme/widgets/pulls/7"}
    return {
        "action": action,
        "issue": issue,
        "comment": {"html_url": f"{PR_URL}#issuecomment-1"},
        "repository": {"full_name": "acme/widgets", "html_url": REPO_URL},
        "sender": make_sender(),
    }


def block_texts(content: dict[str, Any]) -> list[str]:
    return [b["text"]["text"] for b in content["blocks"] if "text" in b]


def attachment_texts(content: dict[str, Any]) -> list[str]:
    elements = content["attachments"][0]["blocks"][0]["elements"]
    return [e["text"] for e in elements if e["type"] == "mrkdwn"]


class Recorder:
    """httpx transport double that records requests and replies from a handler."""

    def __init__(self, status_code: int = 200, body: Any = "ok"):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.body = body

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=str(self.body))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def json(self, index: int = 0) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def event_file(tmp_path):
    def write(payload: dict[str, Any]) -> str:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return write
