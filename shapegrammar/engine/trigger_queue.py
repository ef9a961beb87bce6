"""Thread-safe trigger queue connecting API threads to the GenerationLoop."""

from __future__ import annotations

import queue
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TriggerRequest:
    """Request to regenerate the root after *delay* seconds, reseeding to *seed* first."""

    delay: float = 0.0
    seed: int | None = None


class TriggerQueue:
    """MPSC (multiple-producer, single-consumer) queue for TriggerRequests.

    Any thread pushes requests; the GenerationLoop drains them each tick.
    """

    __slots__ = ("_queue",)

    def __init__(self) -> None:
        self._queue: queue.Queue[TriggerRequest] = queue.Queue()

    def push(self, request: TriggerRequest) -> None:
        """Thread-safe enqueue."""
        self._queue.put_nowait(request)

    def drain(self) -> list[TriggerRequest]:
        """Drain all pending requests in FIFO order (loop thread only)."""
        requests: list[TriggerRequest] = []
        while True:
            try:
                requests.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return requests

    @property
    def empty(self) -> bool:
        return self._queue.empty()
