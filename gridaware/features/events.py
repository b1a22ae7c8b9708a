"""
Structured event sinks.

Core components (provider, resolver) report what happened as named events
with keyword fields; the sink decides whether and where that ends up.
"""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

# Events that indicate degraded behaviour
_WARNING_EVENTS = {"intensity.upstream_error", "intensity.fallback"}


class EventSink(Protocol):
    def emit(self, event: str, **fields: Any) -> None: ...


class LoguruEventSink:
    """Forward events to loguru as bound records."""

    def emit(self, event: str, **fields: Any) -> None:
        level = "WARNING" if event in _WARNING_EVENTS else "DEBUG"
        logger.bind(event=event, **fields).log(level, "{} {}", event, fields)


class NullEventSink:
    def emit(self, event: str, **fields: Any) -> None:
        return None
