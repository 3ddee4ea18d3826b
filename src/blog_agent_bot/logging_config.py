import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

_SECRET_PATTERNS = [
    (re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]+"), "Bearer ***"),
    (re.compile(r"(?i)\b(api[_-]?key|token|password|secret)(\s*[=:]\s*)[^\s,;&]+"), r"\1\2***"),
    (re.compile(r"(\b[a-z][a-z0-9+.-]*://)[^\s:/@]+:[^\s@/]+@"), r"\1***@"),
]

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"


def redact_secrets(record: dict) -> None:
    """Loguru patcher: mask credentials that slipped into a log message."""
    message = record["message"]
    for pattern, replacement in _SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    record["message"] = message


@dataclass(frozen=True)
class ConsoleSink:
    colorize: bool = True

    def attach(self, level: str) -> str:
        logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, colorize=self.colorize)
        return f"console (stderr, {level})"


@dataclass(frozen=True)
class FileSink:
    """Rotating log file; ``serialize`` writes one JSON record per line."""

    path: str = "bot.log"
    rotation: str = "10 MB"
    retention: int = 5
    serialize: bool = False

    def attach(self, level: str) -> str:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            self.path,
            level=level,
            format=_FILE_FORMAT,
            rotation=self.rotation,
            retention=self.retention,
            serialize=self.serialize,
            enqueue=True,
        )
        kind = "json file" if self.serialize else "file"
        return f"{kind} ({self.path}, {level})"


_SINKS: dict[str, type] = {"console": ConsoleSink, "file": FileSink}

_DEFAULT_SINKS: list[dict[str, Any]] = [{"type": "console"}, {"type": "file"}]


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
) -> list[str]:
    """Replace all loguru sinks with the configured ones.

    Each entry of ``consumers`` (the ``LogConsumers`` config list) names a
    sink ``type`` and may override ``level``; other keys go to the sink.
    Returns one description per attached sink.
    """
    logger.remove()
    logger.configure(patcher=redact_secrets)

    descriptions: list[str] = []
    for entry in _DEFAULT_SINKS if consumers is None else consumers:
        options = dict(entry)
        sink_type = options.pop("type", "")
        sink_level = options.pop("level", level)
        sink_cls = _SINKS.get(sink_type)
        if sink_cls is None:
            logger.warning(f"Skipping log consumer with unknown type {sink_type!r}")
            continue
        descriptions.append(sink_cls(**options).attach(sink_level))
    return descriptions
