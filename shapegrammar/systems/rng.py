"""Reseedable deterministic random source using xxhash.

The generator is counter based: draw ``n`` after a reset is the 64-bit hash

    xxh64(pack("<QQ", key, n)).intdigest()

where ``key`` is the seed masked to 64 bits. The algorithm is fully
specified here, so a fixed non-zero seed reproduces the same sequence on
every platform and across resets. Seed 0 means "unset": every reset then
draws a fresh key from the OS entropy pool, so two resets never repeat.
"""

from __future__ import annotations

import logging
import secrets
import struct

import xxhash

logger = logging.getLogger(__name__)

_MASK64 = (1 << 64) - 1
_FLOAT_SCALE = 1.0 / (1 << 53)


class RandomSource:
    """Seeded pseudo-random number generator shared by a grammar tree.

    The live state is created lazily on the first draw and re-derived by
    ``reset()`` or ``set_seed()``.
    """

    __slots__ = ("_seed", "_key", "_counter")

    def __init__(self, seed: int = 0) -> None:
        self._seed = seed
        self._key: int | None = None
        self._counter = 0

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def draws(self) -> int:
        """Number of values drawn since the last reset."""
        return self._counter

    def set_seed(self, seed: int) -> None:
        """Store *seed* and immediately reset the live generator from it."""
        self._seed = seed
        self.reset()

    def reset(self) -> None:
        """Re-derive the live generator from the stored seed."""
        if self._seed == 0:
            self._key = secrets.randbits(64)
        else:
            self._key = self._seed & _MASK64
        self._counter = 0
        logger.debug("RandomSource reset (seed=%d)", self._seed)

    # -- draws --

    def _next_u64(self) -> int:
        if self._key is None:
            self.reset()
        payload = struct.pack("<QQ", self._key, self._counter)
        self._counter += 1
        return xxhash.xxh64(payload).intdigest()

    def next_float(self) -> float:
        """Return a float in [0.0, 1.0)."""
        # top 53 bits, so the result never rounds up to 1.0
        return (self._next_u64() >> 11) * _FLOAT_SCALE

    def next_int(self, low: int, high: int | None = None) -> int:
        """Return an integer in [0, low) or, with two arguments, [low, high).

        An empty range (high <= low) is a programming error and raises.
        """
        if high is None:
            low, high = 0, low
        if high <= low:
            raise ValueError(f"Empty random range [{low}, {high})")
        return low + int(self.next_float() * (high - low))

    def next_bool(self, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self.next_float() < probability

    def __repr__(self) -> str:
        return f"RandomSource(seed={self._seed}, draws={self._counter})"
