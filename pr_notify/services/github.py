"""Pull request events: which ones we notify about and what the message says."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, NamedTuple, Optional, Sequence

import httpx

from pr_notify.config import Inputs
from pr_notify.context import EventContext
from pr_notify.errors import GitHubAPIError
from pr_notify.schemas import (
    Branch,
    IssueCommentEvent,
    PullRequest,
    PullRequestEvent,
    PullRequestReviewEvent,
    Repository,
    Reviewer,
    parse_event,
)

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 15
GITHUB_API_VERSION = "2022-11-28"

UNKNOWN = "unknown"
FALLBACK_MESSAGE = "do nothing"
GITHUB_FAVICON_URL = "https://github.githubassets.com/favicon.ico"
FOOTER_TEXT = "From GitHub Action | Powered By <https://github.com/daint2git|daint2git>"

GREEN = "#2DA44E"
BLUE = "#0D4C8C"
PURPLE = "#8250DF"
RED = "#CF222E"
LIGHT_BLUE = "#BBDFFF"
GRAY = "#DDDDDD"

SUPPORTED_ACTIONS: dict[str, frozenset[str]] = {
    "pull_request": frozenset({"opened", "reopened", "closed"}),
    "pull_request_review": frozenset({"submitted", "edited", "dismissed"}),
    "issue_comment": frozenset({"created", "edited"}),
}


class EventStyle(NamedTuple):
    status: str
    color: str
    message: Optional[str]


# (event name, action, sub-state) -> style
EVENT_STYLES: dict[tuple[str, str, Optional[str]], EventStyle] = {
    ("pull_request", "opened", None): EventStyle(
        "opened", GREEN, "opened this pull request."
    ),
    ("pull_request", "reopened", None): EventStyle(
        "reopened", BLUE, "reopened this pull request."
    ),
    ("pull_request", "closed", "merged"): EventStyle(
        "merged", PURPLE, "merged this pull request."
    ),
    ("pull_request", "closed", "unmerged"): EventStyle(
        "closed", RED, "closed this pull request."
    ),
    ("pull_request_review", "submitted", "commented"): EventStyle(
        "review: commented", LIGHT_BLUE, "reviewed this pull request."
    ),
    ("pull_request_review", "submitted", "approved"): EventStyle(
        "review: approved", GREEN, "approved this pull request."
    ),
    ("pull_request_review", "submitted", "changes_requested"): EventStyle(
        "review: changes requested", RED, "requested changes on this pull request."
    ),
    ("pull_request_review", "edited", None): EventStyle(
        "review: updated a comment",
        LIGHT_BLUE,
        "updated a review comment on this pull request.",
    ),
    ("pull_request_review", "dismissed", None): EventStyle(
        "review: dismissed",
        RED,
        "dismissed the review changes on this pull request.",
    ),
    ("issue_comment", "created", None): EventStyle(
        "commented", LIGHT_BLUE, "commented on this pull request."
    ),
    ("issue_comment", "edited", None): EventStyle(
        "updated a comment", LIGHT_BLUE, "updated a comment on this pull request."
    ),
}


def _dig(data: Any, path: Sequence[str]) -> Any:
    current = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def is_valid_event(event_name: str, payload: Mapping[str, Any] | None) -> bool:
    """
    Check whether the event/action pair is one we notify about.

    Review edits that do not touch the body and comments on plain issues
    are rejected.
    """
    action = _dig(payload, ("action",))
    if not action:
        return False

    allowed = SUPPORTED_ACTIONS.get(event_name)
    if allowed is None or action not in allowed:
        return False

    if event_name == "pull_request_review" and action == "edited":
        return _dig(payload, ("changes", "body")) is not None

    if event_name == "issue_comment":
        return bool(_dig(payload, ("issue", "pull_request")))

    return True


def resolve_style(
    event_name: str, action: str, sub_state: Optional[str] = None
) -> Optional[EventStyle]:
    return EVENT_STYLES.get((event_name, action, sub_state))


def generate_user(github_user: str | None, mapping: Mapping[str, str]) -> str:
    """
    Render a GitHub user for Slack.

    Example
    -------
    {'alice': 'U123'}: 'alice' → '<@U123> (alice)', 'bob' → 'bob'
    """
    login = github_user or ""
    slack_member_id = mapping.get(login)
    return f"<@{slack_member_id}> ({login})" if slack_member_id else login


def generate_branch_url(repository: Repository | None, name: str, fallback: str = "") -> str:
    base = (repository.html_url if repository and repository.html_url else fallback) or ""
    return f"{base}/tree/{name}"


def get_requested_reviewers(
    requested_reviewers: Sequence[Reviewer], mapping: Mapping[str, str]
) -> list[str]:
    """Requested users only; teams have no login and are left out."""
    return [
        generate_user(reviewer.login, mapping)
        for reviewer in requested_reviewers
        if reviewer.is_user
    ]


async def fetch_pull_request(
    ctx: EventContext,
    token: str,
    pull_number: int,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PullRequest | None:
    """
    Get pull request detail from the REST API.

    Returns
    -------
    PullRequest | None
        None when no token is configured; the caller just omits the fields.
    """
    if not token:
        return None

    url = f"{ctx.api_url}/repos/{ctx.owner}/{ctx.repo}/pulls/{pull_number}"
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS, transport=transport) as client:
        resp = await client.get(url, headers=headers)
    if resp.status_code >= 300:
        raise GitHubAPIError(resp.status_code, resp.text)
    return PullRequest.model_validate(resp.json())


@dataclass
class Summary:
    """Everything the message shows about one event."""

    style: EventStyle
    number: Any = "?"
    title: str = ""
    message_url: str = ""
    head: Optional[tuple[str, str]] = None
    base: Optional[tuple[str, str]] = None
    changed_files: Optional[tuple[str, int]] = None
    created_by: Optional[str] = None
    labels: list[str] = field(default_factory=list)
    requested_reviewers: list[str] = field(default_factory=list)


Collector = Callable[[Any, Inputs, EventContext, Optional[httpx.AsyncBaseTransport]], Awaitable[Summary]]


def _branch(branch: Branch | None, fallback: str) -> Optional[tuple[str, str]]:
    if branch is None:
        return None
    return generate_branch_url(branch.repo, branch.ref, fallback), branch.ref


def _changed_files(pr: PullRequest) -> Optional[tuple[str, int]]:
    if pr.changed_files is None:
        return None
    return f"{pr.html_url}/files", pr.changed_files


def _repo_url(event: Any) -> str:
    repository = getattr(event, "repository", None)
    return (repository.html_url if repository else None) or ""


async def _collect_pull_request(
    event: PullRequestEvent,
    inputs: Inputs,
    ctx: EventContext,
    transport: Optional[httpx.AsyncBaseTransport],
) -> Summary:
    pr = event.pull_request
    sub_state = None
    if event.action == "closed":
        sub_state = "merged" if pr.merged else "unmerged"
    style = resolve_style("pull_request", event.action, sub_state) or EventStyle(
        event.action, GRAY, None
    )
    fallback = _repo_url(event)
    return Summary(
        style=style,
        number=event.number,
        title=pr.title,
        message_url=pr.html_url,
        head=_branch(pr.head, fallback),
        base=_branch(pr.base, fallback),
        changed_files=_changed_files(pr),
        created_by=pr.user.login if pr.user else None,
        labels=[label.name for label in pr.labels],
        requested_reviewers=get_requested_reviewers(
            pr.requested_reviewers, inputs.user_mapping
        ),
    )


async def _collect_pull_request_review(
    event: PullRequestReviewEvent,
    inputs: Inputs,
    ctx: EventContext,
    transport: Optional[httpx.AsyncBaseTransport],
) -> Summary:
    pr = event.pull_request
    action = event.action
    if action == "submitted":
        # state: commented | approved | changes_requested
        state = (event.review.state or "").lower()
        style = resolve_style("pull_request_review", action, state) or EventStyle(
            f"review: {state.replace('_', ' ')}", GRAY, None
        )
    else:
        style = resolve_style("pull_request_review", action) or EventStyle(
            f"review: {action}", GRAY, None
        )

    fallback = _repo_url(event)
    summary = Summary(
        style=style,
        number=pr.number,
        title=pr.title,
        message_url=event.review.html_url,
        head=_branch(pr.head, fallback),
        base=_branch(pr.base, fallback),
        created_by=pr.user.login if pr.user else None,
        labels=[label.name for label in pr.labels],
        requested_reviewers=get_requested_reviewers(
            pr.requested_reviewers, inputs.user_mapping
        ),
    )

    detail = await fetch_pull_request(
        ctx, inputs.github_token, pr.number, transport=transport
    )
    if detail:
        summary.changed_files = _changed_files(detail)
    return summary


async def _collect_issue_comment(
    event: IssueCommentEvent,
    inputs: Inputs,
    ctx: EventContext,
    transport: Optional[httpx.AsyncBaseTransport],
) -> Summary:
    issue = event.issue
    style = resolve_style("issue_comment", event.action) or EventStyle(
        event.action, GRAY, None
    )
    summary = Summary(
        style=style,
        number=issue.number,
        title=issue.title,
        message_url=event.comment.html_url,
        labels=[label.name for label in issue.labels],
    )

    # the comment payload has no branch, author or file information
    detail = await fetch_pull_request(
        ctx, inputs.github_token, issue.number, transport=transport
    )
    if detail:
        fallback = _repo_url(event)
        summary.head = _branch(detail.head, fallback)
        summary.base = _branch(detail.base, fallback)
        summary.created_by = detail.user.login if detail.user else None
        summary.changed_files = _changed_files(detail)
        summary.requested_reviewers = get_requested_reviewers(
            detail.requested_reviewers, inputs.user_mapping
        )
    return summary


HANDLERS: dict[str, Collector] = {
    "pull_request": _collect_pull_request,
    "pull_request_review": _collect_pull_request_review,
    "issue_comment": _collect_issue_comment,
}


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_blocks(summary: Summary, mapping: Mapping[str, str]) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"PULL REQUEST #{summary.number} - {summary.style.status.upper()}",
            },
        },
        _section(f":small_blue_diamond: *Title:  {summary.title}*"),
    ]

    if summary.head:
        blocks.append(_section(f":small_blue_diamond: *Head branch:*  <{'|'.join(summary.head)}>"))

    if summary.base:
        blocks.append(_section(f":small_blue_diamond: *Base branch:*  <{'|'.join(summary.base)}>"))

    if summary.changed_files:
        url, count = summary.changed_files
        blocks.append(_section(f":small_blue_diamond: *Files changed:*  <{url}|{count}>"))

    if summary.labels:
        labels = " ".join(f"`{label}`" for label in summary.labels)
        blocks.append(_section(f":label: *Labels:*  {labels}"))

    if summary.requested_reviewers:
        reviewers = ", ".join(summary.requested_reviewers)
        blocks.append(_section(f":technologist: *Requested Reviewers:*  {reviewers}"))

    if summary.created_by:
        blocks.append(
            _section(f":technologist: *Created by:*  {generate_user(summary.created_by, mapping)}")
        )

    blocks.append({"type": "divider"})
    return blocks


def build_attachment(
    summary: Summary, sender: Mapping[str, Any], mapping: Mapping[str, str]
) -> dict[str, Any]:
    return {
        "color": summary.style.color,
        "blocks": [
            {
                "type": "context",
                "elements": [
                    {
                        "type": "image",
                        "image_url": sender.get("avatar_url") or GITHUB_FAVICON_URL,
                        "alt_text": "sender avatar image",
                    },
                    {
                        "type": "mrkdwn",
                        "text": f"{generate_user(sender.get('login'), mapping)} "
                        f"{summary.style.message or FALLBACK_MESSAGE}",
                    },
                    {
                        "type": "mrkdwn",
                        "text": f"<{summary.message_url}|View it on GitHub>",
                    },
                ],
            },
            {
                "type": "context",
                "elements": [
                    {
                        "type": "image",
                        "image_url": GITHUB_FAVICON_URL,
                        "alt_text": "github favicon",
                    },
                    {"type": "mrkdwn", "text": FOOTER_TEXT},
                ],
            },
        ],
    }


async def build_message_content(
    inputs: Inputs,
    ctx: EventContext,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """
    Build the Slack ``blocks`` and ``attachments`` for the triggering event.

    Network access only happens for review and comment events, to fetch the
    pull request fields their payloads lack.
    """
    handler = HANDLERS.get(ctx.event_name)
    if handler is None:
        logger.info("Unsupported event type.")
        summary = Summary(style=EventStyle(UNKNOWN, GRAY, None))
    else:
        event = parse_event(ctx.event_name, ctx.payload)
        summary = await handler(event, inputs, ctx, transport)

    sender = ctx.payload.get("sender") or {}
    return {
        "blocks": build_blocks(summary, inputs.user_mapping),
        "attachments": [build_attachment(summary, sender, inputs.user_mapping)],
    }
