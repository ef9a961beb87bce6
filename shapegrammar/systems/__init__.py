"""Engine systems: deterministic random source."""

from shapegrammar.systems.rng import RandomSource

__all__ = ["RandomSource"]
