# vistas_addons/core_helpers/minilog.py

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


@dataclass
class LogMessage:
    level: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MiniLog:
    """Messages collected while building a page, readable from templates."""

    def __init__(self, channel: str = "master"):
        self.channel = channel
        self._messages: List[LogMessage] = []

    def log(self, level: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{level}'.")
        self._messages.append(LogMessage(level=level, message=message, context=dict(context or {})))
        logger.log(LEVELS[level], f"[{self.channel}] {message}")

    def debug(self, message: str, context=None) -> None:
        self.log("debug", message, context)

    def info(self, message: str, context=None) -> None:
        self.log("info", message, context)

    def notice(self, message: str, context=None) -> None:
        self.log("notice", message, context)

    def warning(self, message: str, context=None) -> None:
        self.log("warning", message, context)

    def error(self, message: str, context=None) -> None:
        self.log("error", message, context)

    def critical(self, message: str, context=None) -> None:
        self.log("critical", message, context)

    def read(self, levels: Optional[Iterable[str]] = None) -> List[LogMessage]:
        wanted = set(levels) if levels is not None else None
        return [m for m in self._messages if wanted is None or m.level in wanted]

    def clear(self) -> None:
        self._messages.clear()
