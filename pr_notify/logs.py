"""Logging through GitHub Actions workflow commands."""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, TextIO

from pr_notify.utils import escape_data

LOGGER_NAME = "pr_notify"

COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class ActionsLogHandler(logging.StreamHandler):
    """
    Emit records as workflow commands.

    DEBUG → ``::debug::msg``, WARNING → ``::warning::msg``,
    ERROR/CRITICAL → ``::error::msg``; INFO is printed as is.
    """

    def __init__(self, stream: TextIO | None = None):
        super().__init__(stream or sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_data(message)}"


def configure_logging(environ: Mapping[str, str] | None = None) -> logging.Logger:
    """Attach the Actions handler once; DEBUG when the runner has step debug on."""
    env = os.environ if environ is None else environ
    logger = logging.getLogger(LOGGER_NAME)
    debug = env.get("RUNNER_DEBUG") == "1" or env.get("ACTIONS_STEP_DEBUG") == "true"
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if not any(isinstance(h, ActionsLogHandler) for h in logger.handlers):
        handler = ActionsLogHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
