"""GenerationLoop — the cooperative tick engine around one grammar root.

Phase cycle:
  1. Triggers — drain queued regenerate requests and fire them in order
  2. Scheduler — advance loop time and run delayed expansions now due
  3. Advancement — publish events, advance tick
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from shapegrammar.engine.trigger_queue import TriggerQueue, TriggerRequest
from shapegrammar.utils.event_log import GenerationEvent

if TYPE_CHECKING:
    from shapegrammar.config import GrammarConfig
    from shapegrammar.engine.trigger import BuildTrigger
    from shapegrammar.grammar.context import GrammarContext
    from shapegrammar.utils.event_log import EventLog

logger = logging.getLogger(__name__)


class GenerationLoop:
    """Single-threaded driver for a grammar context.

    All shape mutation happens inside ``tick_once`` on the calling thread;
    other threads only push ``TriggerRequest``s.
    """

    __slots__ = (
        "_config",
        "_context",
        "_trigger",
        "_requests",
        "_event_log",
        "_tick",
        "_tick_events",
    )

    def __init__(
        self,
        config: GrammarConfig,
        context: GrammarContext,
        trigger: BuildTrigger,
        requests: TriggerQueue | None = None,
        event_log: EventLog | None = None,
    ) -> None:
        self._config = config
        self._context = context
        self._trigger = trigger
        self._requests = requests or TriggerQueue()
        self._event_log = event_log
        self._tick = 0
        self._tick_events: list[GenerationEvent] = []

    @property
    def context(self) -> GrammarContext:
        return self._context

    @property
    def trigger(self) -> BuildTrigger:
        return self._trigger

    @property
    def requests(self) -> TriggerQueue:
        return self._requests

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def tick_events(self) -> list[GenerationEvent]:
        """Events emitted during the most recent tick."""
        return self._tick_events

    def _emit(self, category: str, message: str, node_ids: tuple[int, ...] = ()) -> None:
        event = GenerationEvent(tick=self._tick, category=category, message=message, node_ids=node_ids)
        self._tick_events.append(event)
        if self._event_log is not None:
            self._event_log.append(event)

    # -- lifecycle --

    def start(self) -> None:
        """Mark the context live and fire the start-up build, if configured."""
        self._context.live = True
        self._tick_events = []
        if self._config.build_on_start:
            self._trigger.build(self._config.regenerate_delay)
            self._emit("build", f"Start-up build of '{self._trigger.root.name}'",
                       (self._trigger.root.node_id,))

    def stop(self) -> None:
        self._context.live = False

    def request(self, delay: float = 0.0, seed: int | None = None) -> None:
        """Queue a regeneration; safe to call from any thread."""
        self._requests.push(TriggerRequest(delay=delay, seed=seed))

    def tick_once(self, dt: float | None = None) -> bool:
        """Execute a single tick of *dt* seconds.

        Returns False once ``max_ticks`` ticks have run. Ticks past the limit
        still drain queued triggers and run due expansions.
        """
        self._step(self._config.tick_rate if dt is None else dt)
        self._tick += 1

        max_ticks = self._config.max_ticks
        if max_ticks is not None and self._tick >= max_ticks:
            if self._tick == max_ticks:
                logger.info("Tick %d: Max ticks reached.", self._tick)
            return False
        return True

    def run(self, realtime: bool = True) -> None:
        """Tick until max_ticks (forever if None), sleeping ``tick_rate`` between ticks if *realtime*."""
        logger.info("=== Generation loop started (grammar=%s) ===", self._config.grammar)
        self.start()
        try:
            while self.tick_once():
                if realtime:
                    time.sleep(self._config.tick_rate)
        finally:
            self.stop()
        logger.info("=== Generation loop finished at tick %d ===", self._tick)

    def _step(self, dt: float) -> None:
        self._tick_events = []
        root = self._trigger.root

        # --- Phase 1: Triggers ---
        for req in self._requests.drain():
            self._trigger.build(req.delay, req.seed)
            self._emit(
                "build",
                f"Regenerate '{root.name}' (seed={req.seed}, delay={req.delay:g}s)",
                (root.node_id,),
            )

        # --- Phase 2: Delayed expansions ---
        expanded = self._context.scheduler.advance(dt)
        for shape in expanded:
            self._emit(
                "expand",
                f"Delayed expansion of '{shape.name}': {shape.number_of_generated_objects} objects",
                (shape.node_id,),
            )
        if expanded:
            logger.debug("Tick %d: %d delayed expansions ran", self._tick, len(expanded))
