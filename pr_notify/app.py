"""the single run of the action."""

from __future__ import annotations

import asyncio
import logging
import random
import sys
from typing import Mapping

import httpx
from slack_sdk.web.async_client import AsyncWebClient

from pr_notify.config import Inputs
from pr_notify.context import EventContext
from pr_notify.logs import configure_logging
from pr_notify.services.github import build_message_content, is_valid_event
from pr_notify.services.slack import Chooser, deliver
from pr_notify.utils import normalize_error, stringify

logger = logging.getLogger(__name__)


async def run(
    environ: Mapping[str, str] | None = None,
    *,
    web: AsyncWebClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    choose: Chooser = random.choice,
) -> int:
    """
    Resolve → classify → build → deliver.

    Returns the process exit code: 0 when the message was sent or the event
    was skipped, 1 when anything failed.
    """
    try:
        ctx = EventContext.from_env(environ)
        logger.debug("GitHub context: %s", stringify(ctx.as_dict()))

        if not is_valid_event(ctx.event_name, ctx.payload):
            logger.debug("Invalid event.")
            logger.info("Skipped action.")
            return 0

        inputs = Inputs.from_env(environ)
        inputs.validate()

        content = await build_message_content(inputs, ctx, transport=transport)
        await deliver(inputs, content, web=web, transport=transport, choose=choose)
    except Exception as exc:
        logger.error(normalize_error(exc))
        return 1
    return 0


def main() -> None:
    configure_logging()
    sys.exit(asyncio.run(run()))
