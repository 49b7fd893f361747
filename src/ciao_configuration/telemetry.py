"""Telemetry for configuration bootstrap.

CiaoConfig reports one ``config.bootstrap`` event per construction.  Sinks
decide where the event goes; the default drops it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

BOOTSTRAP_EVENT = "config.bootstrap"


@dataclass
class TelemetryEvent:
    """A named event with flat attributes and a wall-clock timestamp."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    timestamp_ms: float = field(default_factory=lambda: time.time() * 1000)


@runtime_checkable
class TelemetrySink(Protocol):
    def emit(self, event: TelemetryEvent) -> None: ...


class NoOpTelemetrySink:
    def emit(self, event: TelemetryEvent) -> None:
        pass


class InMemoryTelemetrySink:
    """Keeps every event; used by tests and by CIPs that inspect their own start-up."""

    def __init__(self) -> None:
        self.events: list[TelemetryEvent] = []

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> list[TelemetryEvent]:
        return [e for e in self.events if e.name == name]


class LoggerTelemetrySink:
    """Sink that writes each event as one INFO record on the given logger.

    Event fields travel in ``extra`` so structured log handlers can pick
    them up without parsing the message.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def emit(self, event: TelemetryEvent) -> None:
        self.logger.info(
            "%s %s",
            event.name,
            " ".join(f"{k}={v}" for k, v in sorted(event.attributes.items())),
            extra={
                "event_name": event.name,
                "event_timestamp_ms": event.timestamp_ms,
                "event_attributes": event.attributes,
            },
        )
