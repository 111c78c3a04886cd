"""Slack delivery: Web API (bot token) or incoming webhook."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence

import httpx
from slack_sdk.http_retry.builtin_async_handlers import (
    AsyncConnectionErrorRetryHandler,
    AsyncRateLimitErrorRetryHandler,
    AsyncServerErrorRetryHandler,
)
from slack_sdk.http_retry.builtin_interval_calculators import (
    BackoffRetryIntervalCalculator,
)
from slack_sdk.web.async_client import AsyncWebClient

from pr_notify.config import Inputs
from pr_notify.errors import SlackWebhookError
from pr_notify.utils import stringify

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "This is a message from a github pull request."
HTTP_TIMEOUT_SECONDS = 15
MAX_RETRIES = 5
# 10 + 20 + 40 + 80 + 160 s between attempts, about five minutes
BACKOFF_FACTOR = 10.0
REACTIONS_SCOPE = "reactions:write"
REACTION_ICONS: tuple[str, ...] = (
    "heart",
    "heart_eyes",
    "smiling_face_with_3_hearts",
    "medal",
    "100",
)

Chooser = Callable[[Sequence[str]], str]
JSONDict = dict[str, Any]


class PostResult(NamedTuple):
    ts: Optional[str]
    scopes: list[str]

    @property
    def can_react(self) -> bool:
        return bool(self.ts) and REACTIONS_SCOPE in self.scopes


def create_web_client(token: str) -> AsyncWebClient:
    """
    Web API client that retries rate-limited calls (honouring Retry-After),
    connection errors and 5xx responses with exponential backoff, five times each.
    """
    return AsyncWebClient(
        token=token,
        retry_handlers=[
            AsyncRateLimitErrorRetryHandler(max_retry_count=MAX_RETRIES),
            AsyncConnectionErrorRetryHandler(
                max_retry_count=MAX_RETRIES,
                interval_calculator=BackoffRetryIntervalCalculator(backoff_factor=BACKOFF_FACTOR),
            ),
            AsyncServerErrorRetryHandler(
                max_retry_count=MAX_RETRIES,
                interval_calculator=BackoffRetryIntervalCalculator(backoff_factor=BACKOFF_FACTOR),
            ),
        ],
    )


def _scopes(data: Mapping[str, Any], headers: Mapping[str, Any] | None) -> list[str]:
    scopes = (data.get("response_metadata") or {}).get("scopes")
    if scopes:
        return list(scopes)
    for key, value in (headers or {}).items():
        if key.lower() == "x-oauth-scopes":
            raw = value[0] if isinstance(value, (list, tuple)) else value
            return [s.strip() for s in str(raw).split(",") if s.strip()]
    return []


async def post_message(web: AsyncWebClient, inputs: Inputs, content: JSONDict) -> PostResult:
    """Post the message to the configured channel."""
    logger.info("Action: slack.postMessage: sending a message.")

    response = await web.chat_postMessage(
        channel=inputs.channel_id,
        text=DEFAULT_TEXT,
        blocks=content.get("blocks"),
        attachments=content.get("attachments"),
    )

    logger.info("Action: slack.postMessage: sent to Slack.")
    data = response.data if isinstance(response.data, dict) else {}
    logger.debug(
        "Action: slack.postMessage: http response received: %s", stringify(data)
    )
    return PostResult(ts=data.get("ts"), scopes=_scopes(data, response.headers))


async def add_reaction(
    web: AsyncWebClient,
    inputs: Inputs,
    timestamp: str,
    *,
    choose: Chooser = random.choice,
) -> str:
    """React to the posted message with a random icon; returns the icon name."""
    icon_name = choose(REACTION_ICONS)

    logger.info("Action: slack.addReaction: sending a message.")
    response = await web.reactions_add(
        channel=inputs.channel_id,
        name=icon_name,
        timestamp=timestamp,
    )
    logger.info("Action: slack.addReaction: sent to Slack.")
    logger.debug(
        "Action: slack.addReaction: http response received: %s", stringify(response.data)
    )
    return icon_name


async def post_message_with_webhook(
    webhook_url: str,
    content: JSONDict,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Single POST to the incoming webhook; no retry."""
    logger.info("Action: slack.postMessageWithWebhook: sending a message.")

    payload: JSONDict = {"text": DEFAULT_TEXT, **content}
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS, transport=transport) as client:
        resp = await client.post(webhook_url, json=payload)
    if resp.status_code >= 300:
        raise SlackWebhookError(resp.status_code, resp.text)

    logger.info("Action: slack.postMessageWithWebhook: sent to Slack.")
    logger.debug(
        "Action: slack.postMessageWithWebhook: http response received: %s",
        stringify({"status": resp.status_code, "text": resp.text}),
    )
    return resp.text


async def deliver(
    inputs: Inputs,
    content: JSONDict,
    *,
    web: AsyncWebClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    choose: Chooser = random.choice,
) -> None:
    """
    Send ``content`` with whichever technique is configured.

    The bot token wins when both are present. The reaction is only added
    when the post returned a timestamp and the app holds ``reactions:write``.
    """
    if inputs.bot_token:
        client = web or create_web_client(inputs.bot_token)
        result = await post_message(client, inputs, content)
        if result.can_react:
            await add_reaction(client, inputs, result.ts, choose=choose)
        return

    if inputs.webhook_url:
        await post_message_with_webhook(inputs.webhook_url, content, transport=transport)
