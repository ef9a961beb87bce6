"""Pending delayed expansions, drained by the generation loop each tick."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)


@dataclass(order=True, slots=True)
class _Pending:
    due: float
    seq: int
    node_id: int = field(compare=False)
    shape: Shape = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)


class RegenerationScheduler:
    """Time-ordered queue of shapes waiting to expand.

    The clock only moves through ``advance()``, so the schedule is fully
    deterministic. At most one entry per shape is pending: scheduling a
    shape again, or cancelling it, invalidates the older entry.
    """

    __slots__ = ("_now", "_heap", "_by_node", "_seq")

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: list[_Pending] = []
        self._by_node: dict[int, _Pending] = {}
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._by_node)

    def is_pending(self, node_id: int) -> bool:
        return node_id in self._by_node

    def schedule(self, shape: Shape, delay: float) -> None:
        """Expand *shape* once *delay* seconds of loop time have passed."""
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.cancel(shape.node_id)
        entry = _Pending(self._now + delay, next(self._seq), shape.node_id, shape)
        heapq.heappush(self._heap, entry)
        self._by_node[shape.node_id] = entry
        logger.debug("Scheduled expansion of %r at t=%.3f", shape, entry.due)

    def cancel(self, node_id: int) -> bool:
        """Drop the pending expansion of *node_id*. Returns True if one existed."""
        entry = self._by_node.pop(node_id, None)
        if entry is None:
            return False
        entry.cancelled = True
        return True

    def advance(self, dt: float) -> list[Shape]:
        """Move the clock forward by *dt* and run every expansion now due.

        Returns the shapes that expanded, in the order they ran. Entries for
        shapes destroyed since scheduling are dropped. Errors raised by a
        production rule propagate to the caller.
        """
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        self._now += dt
        expanded: list[Shape] = []
        while self._heap and self._heap[0].due <= self._now:
            entry = heapq.heappop(self._heap)
            if entry.cancelled:
                continue
            self._by_node.pop(entry.node_id, None)
            if not entry.shape.alive:
                logger.debug("Skipping expansion of destroyed node #%d", entry.node_id)
                continue
            entry.shape._run_expansion()
            expanded.append(entry.shape)
        return expanded

    def clear(self) -> None:
        for entry in self._by_node.values():
            entry.cancelled = True
        self._heap.clear()
        self._by_node.clear()
