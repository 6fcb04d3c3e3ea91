"""Notification and navigation sinks injected into the controller."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NoticeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity, kind: NoticeKind) -> None:
        ...


class Navigator(Protocol):
    def navigate(self, route: str) -> None:
        ...


_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LogNotifier:
    """Writes notifications to the log; the default when no UI is attached."""

    def notify(self, message: str, severity: Severity, kind: NoticeKind) -> None:
        logger.log(_LEVELS[severity], f"[{kind.value}] {message}")


class NullNavigator:
    def navigate(self, route: str) -> None:
        logger.debug(f"Navigate to {route}")
