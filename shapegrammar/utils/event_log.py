"""Thread-safe ring buffer for generation events exposed via the API."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GenerationEvent:
    """A single generation event for the API event feed."""

    tick: int
    category: str
    message: str
    node_ids: tuple[int, ...] = ()  # IDs of shapes involved in this event


class EventLog:
    """Bounded event log. Writers append; readers snapshot a slice.

    Oldest events are dropped once ``maxlen`` is reached. Thread-safe via a
    simple lock: writes happen once per trigger and reads are copies.
    """

    __slots__ = ("_buffer", "_lock")

    def __init__(self, maxlen: int = 1000) -> None:
        self._buffer: deque[GenerationEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def append(self, event: GenerationEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def since_tick(self, tick: int) -> list[GenerationEvent]:
        """Return all events with tick >= *tick*."""
        with self._lock:
            return [e for e in self._buffer if e.tick >= tick]

    def latest(self, count: int = 50) -> list[GenerationEvent]:
        """Return the *count* most recent events."""
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
