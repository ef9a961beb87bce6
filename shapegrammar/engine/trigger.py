"""BuildTrigger — reset the random source, then regenerate a root shape."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shapegrammar.systems.rng import RandomSource

if TYPE_CHECKING:
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)


class BuildTrigger:
    """Drives one grammar root.

    Each ``build()`` call performs exactly one regeneration. The random
    source is reset (or reseeded) before the old content is deleted, so a
    fixed seed rebuilds the same tree every time.
    """

    __slots__ = ("_root", "_random", "_build_on_start", "_builds")

    def __init__(
        self,
        root: Shape,
        random_source: RandomSource | None = None,
        build_on_start: bool = False,
    ) -> None:
        self._root = root
        self._random = random_source if random_source is not None else root.get_component(RandomSource)
        self._build_on_start = build_on_start
        self._builds = 0

    @property
    def root(self) -> Shape:
        return self._root

    @property
    def random_source(self) -> RandomSource | None:
        return self._random

    @property
    def builds(self) -> int:
        """Number of regenerations triggered so far."""
        return self._builds

    def start(self) -> None:
        if self._build_on_start:
            self.build()

    def build(self, delay: float = 0.0, seed: int | None = None) -> None:
        """Reseed to *seed* (or reset the current seed), then regenerate."""
        if self._random is not None:
            if seed is not None:
                self._random.set_seed(seed)
            else:
                self._random.reset()
        elif seed is not None:
            logger.warning("Seed %d ignored: root '%s' has no RandomSource", seed, self._root.name)

        self._root.generate(delay)
        self._builds += 1
        logger.info(
            "Build #%d of '%s' (seed=%s, delay=%.2fs): %d objects generated",
            self._builds, self._root.name,
            self._random.seed if self._random is not None else "ambient",
            delay, self._root.number_of_generated_objects,
        )
