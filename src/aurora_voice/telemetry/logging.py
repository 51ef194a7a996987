"""Runtime telemetry and structured logging sinks."""

from __future__ import annotations

import logging
from typing import Protocol

from rich.logging import RichHandler


class Telemetry(Protocol):
    """Reports operational events, traces, and assistant outcomes."""

    def emit(self, event_name: str, payload: dict) -> None:
        """Publish telemetry event to the configured sink."""


class LoggingTelemetry:
    """Telemetry sink that forwards events to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("aurora_voice.telemetry")

    def emit(self, event_name: str, payload: dict) -> None:
        self._logger.info(event_name, extra={"telemetry": payload})


def configure_logging(level: str = "WARNING") -> None:
    """Route ``aurora_voice`` loggers through rich's console handler."""
    logger = logging.getLogger("aurora_voice")
    logger.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(rich_tracebacks=True, show_path=False))
    logger.propagate = False
