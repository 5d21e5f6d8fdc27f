"""User-facing notifications.

The controller reports outcomes of explicit actions through a ``Notifier``.
The base class only logs; front ends subclass it to render messages (the CLI
prints them, tests record them).
"""
from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)

# Asks the user a yes/no question; True means proceed.
Confirm = Callable[[str], bool]


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notifier:
    def notify(self, level: Level, message: str) -> None:
        logger.debug("notify %s: %s", level.value, message)
        self._emit(level, message)

    def _emit(self, level: Level, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        self.notify(Level.SUCCESS, message)

    def info(self, message: str) -> None:
        self.notify(Level.INFO, message)

    def warning(self, message: str) -> None:
        self.notify(Level.WARNING, message)

    def error(self, message: str) -> None:
        self.notify(Level.ERROR, message)


class ConsoleNotifier(Notifier):
    """Print ``OK: ...`` / ``WARNING: ...`` / ``ERROR: ...`` lines."""

    _PREFIXES = {
        Level.SUCCESS: "OK",
        Level.INFO: "INFO",
        Level.WARNING: "WARNING",
        Level.ERROR: "ERROR",
    }

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def _emit(self, level: Level, message: str) -> None:
        print(f"{self._PREFIXES[level]}: {message}", file=self.stream or sys.stdout)


def always_confirm(prompt: str) -> bool:
    return True


def never_confirm(prompt: str) -> bool:
    return False
