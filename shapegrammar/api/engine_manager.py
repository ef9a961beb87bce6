"""EngineManager — owns one grammar and runs its GenerationLoop on a background thread.

The API reads from an atomically-swapped immutable TreeSnapshot and only
ever pushes TriggerRequests; shapes are mutated exclusively on the loop
thread (Single-Writer preserved).
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from shapegrammar.core.snapshot import TreeSnapshot
from shapegrammar.engine.generation_loop import GenerationLoop
from shapegrammar.engine.trigger import BuildTrigger
from shapegrammar.grammar.context import GrammarContext
from shapegrammar.grammars.registry import build_grammar
from shapegrammar.utils.event_log import EventLog

if TYPE_CHECKING:
    from shapegrammar.config import GrammarConfig
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)


class EngineManager:
    """Manages the generation lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / stop / regenerate / reset)
    """

    def __init__(self, config: GrammarConfig) -> None:
        self._config = config
        self.config = config
        self._tick_rate: float = config.tick_rate

        # Generation components (built in _build)
        self._context: GrammarContext | None = None
        self._root: Shape | None = None
        self._loop: GenerationLoop | None = None

        # Thread-safe shared state
        self._snapshot_lock = threading.Lock()
        self._latest_snapshot: TreeSnapshot | None = None
        self._event_log = EventLog()

        # Control
        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._stop_requested = threading.Event()

        self._build()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.01, min(value, 2.0))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def loop(self) -> GenerationLoop:
        if self._loop is None:
            raise RuntimeError("EngineManager has no loop — build failed.")
        return self._loop

    # -- snapshot access --

    def get_snapshot(self) -> TreeSnapshot | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="grammar-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def stop(self) -> None:
        self._stop_requested.set()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._thread = None
        logger.info("EngineManager stopped.")

    def regenerate(self, delay: float = 0.0, seed: int | None = None) -> None:
        """Queue one regeneration of the root; runs on the loop's next tick."""
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.loop.request(delay=delay, seed=seed)
        logger.info("Regeneration requested (seed=%s, delay=%.2fs)", seed, delay)

    def reset(self) -> None:
        """Stop, tear down the scene, and rebuild from the config."""
        self.stop()
        if self._context is not None:
            self._context.clear()
        self._event_log.clear()
        self._build()
        logger.info("EngineManager reset.")

    def step(self, dt: float | None = None) -> bool:
        """Run one loop tick on the calling thread (only while stopped)."""
        if self._running.is_set():
            raise RuntimeError("Cannot step while the background loop is running.")
        cont = self.loop.tick_once(dt)
        self._publish_snapshot()
        return cont

    # -- internals --

    def _build(self) -> None:
        cfg = self._config
        self._context = GrammarContext(eager_expansion=cfg.eager_expansion)
        self._root = build_grammar(self._context, cfg)
        trigger = BuildTrigger(self._root, build_on_start=cfg.build_on_start)
        self._loop = GenerationLoop(cfg, self._context, trigger, event_log=self._event_log)
        self._loop.start()
        self._publish_snapshot()

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Grammar thread started.")
        loop = self.loop

        while not self._stop_requested.is_set():
            t0 = time.perf_counter()
            can_continue = loop.tick_once(self._tick_rate)
            self._publish_snapshot()
            if not can_continue:
                logger.info("Generation loop ended at tick %d.", loop.tick)
                break
            elapsed = time.perf_counter() - t0
            time.sleep(max(self._tick_rate - elapsed, 0.0))

        self._running.clear()
        logger.info("Grammar thread exited.")

    def _publish_snapshot(self) -> None:
        if self._context is None or self._root is None or self._loop is None:
            return
        rnd = self._loop.trigger.random_source
        snap = TreeSnapshot.from_root(
            self._context, self._root, self._loop.tick, rnd.seed if rnd is not None else 0,
        )
        with self._snapshot_lock:
            self._latest_snapshot = snap
