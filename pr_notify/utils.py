"""Small helpers shared by the services."""

from __future__ import annotations

import json
from typing import Any


def stringify(value: Any) -> str:
    """Pretty json for debug logs; falls back to ``str`` for odd objects."""
    return json.dumps(value, indent=2, default=str)


def normalize_error(error: Any) -> str:
    """
    Reduce anything raised during a run to a one-line failure reason.

    Examples
    --------
    'boom' → 'boom'
    ValueError('bad') → 'bad'
    {'code': 1} → '{\\n  "code": 1\\n}'
    """
    if isinstance(error, str):
        return error
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    return stringify(error)


def escape_data(value: Any) -> str:
    """Escape a GitHub Actions workflow command message."""
    return (
        str(value if value is not None else "")
        .replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
    )
