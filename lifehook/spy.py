"""Event loggers that record or buffer emitted events."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol


class _EventLogger(Protocol):
    def log_event(self, event: Any) -> None: ...


class Events(list):
    """A list of captured events."""

    def select_by_type_name(self, name: str) -> Events:
        """Return only the events whose class is named ``name``."""
        return Events(event for event in self if type(event).__name__ == name)


class Spy:
    """An event logger that keeps every event it receives."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events = Events()

    def log_event(self, event: Any) -> None:
        with self._lock:
            self._events.append(event)

    def events(self) -> Events:
        """Return a copy of the captured events."""
        with self._lock:
            return Events(self._events)

    def event_types(self) -> list[str]:
        """Return the class name of each captured event."""
        with self._lock:
            return [type(event).__name__ for event in self._events]

    def reset(self) -> None:
        """Forget all captured events."""
        with self._lock:
            self._events.clear()


@dataclass
class LogBuffer:
    """Holds events until a logger is connected, then forwards to it."""

    events: list = field(default_factory=list)
    logger: _EventLogger | None = None

    def log_event(self, event: Any) -> None:
        if self.logger is None:
            self.events.append(event)
        else:
            self.logger.log_event(event)

    def connect(self, logger: _EventLogger) -> None:
        """Flush buffered events to ``logger`` and log through it from now on."""
        self.logger = logger
        for event in self.events:
            logger.log_event(event)
        self.events = []