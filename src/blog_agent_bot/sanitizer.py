from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

MAX_STRING_CHARS = 50_000
MIN_NUMBER = 0
MAX_NUMBER = 1000
MAX_ERROR_CHARS = 200

_UNKNOWN_ERROR = "Unknown error"


def sanitize_tool_args(raw: Any) -> dict[str, Any]:
    """Bound untrusted tool arguments produced by the model.

    Strings are truncated, numbers clamped into [MIN_NUMBER, MAX_NUMBER] and
    booleans kept. Anything else (objects, arrays, null) is dropped, so tools
    must treat every optional field as possibly absent.
    """
    if not isinstance(raw, Mapping):
        return {}

    safe: dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            continue
        # bool is a subclass of int, so it has to be checked first.
        if isinstance(value, bool):
            safe[key] = value
        elif isinstance(value, str):
            safe[key] = value[:MAX_STRING_CHARS]
        elif isinstance(value, (int, float)):
            if isinstance(value, float) and math.isnan(value):
                continue
            safe[key] = min(max(value, MIN_NUMBER), MAX_NUMBER)
    return safe


_ERROR_SCRUBBERS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(?:mysql|postgres(?:ql)?|mongodb(?:\+srv)?|redis|amqp)://\S+", re.IGNORECASE), "[DB_URL]"),
    (re.compile(r"\b[a-z][a-z0-9+.-]*://[^\s/@]+:[^\s/@]+@\S+", re.IGNORECASE), "[URL]"),
    (re.compile(r"\bBearer\s+\S+", re.IGNORECASE), "Bearer [TOKEN]"),
    (re.compile(r"\b(api[_-]?key|token|password|secret)=[^\s&]+", re.IGNORECASE), r"\1=[REDACTED]"),
    (re.compile(r"\bat\s+\S+\s+\(\S+:\d+:\d+\)"), ""),
    (re.compile(r'File "[^"]+", line \d+(?:, in \S+)?'), ""),
    (re.compile(r"(?<![\w.:/-])(?:/home|/root|/var|/usr|/tmp|/opt|/srv|/app|/etc)/\S*"), "[PATH]"),
    (re.compile(r"\b[A-Za-z]:\\\S*"), "[PATH]"),
]


def sanitize_error_for_user(error: BaseException | str | None) -> str:
    """Render an error for end users with secrets, paths and stack frames removed."""
    if error is None:
        return _UNKNOWN_ERROR
    message = str(error).strip()
    if not message and isinstance(error, BaseException):
        message = type(error).__name__
    if not message:
        return _UNKNOWN_ERROR

    for pattern, replacement in _ERROR_SCRUBBERS:
        message = pattern.sub(replacement, message)
    message = " ".join(message.split())
    return message[:MAX_ERROR_CHARS] or _UNKNOWN_ERROR
