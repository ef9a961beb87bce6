"""Layered value noise heightmaps.

Each octave samples a hashed value lattice (xxhash, smoothstep
interpolation) at an increasing frequency and decreasing amplitude. The
summed field is normalized to [0, 1]. All generation is deterministic for a
given ``MapData``.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass, replace

import xxhash

from shapegrammar.systems.rng import RandomSource
from shapegrammar.terrain.heightmap import HeightMap

logger = logging.getLogger(__name__)

_MASK64 = (1 << 64) - 1
_FLOAT_SCALE = 1.0 / (1 << 53)
_MIN_SCALE = 0.0001
_OFFSET_RANGE = 100_000
# RandomSource treats 0 as "unset"; map seed 0 must stay reproducible.
_ZERO_SEED_SUBSTITUTE = 0x5EED

# Falloff curve shape: v^a / (v^a + (b - b*v)^a)
_FALLOFF_A = 3.0
_FALLOFF_B = 2.2


@dataclass(frozen=True)
class MapData:
    """Noise parameters for one heightmap."""

    scale: float = 50.0
    octaves: int = 4
    persistence: float = 0.5
    lacunarity: float = 2.0
    seed: int = 0
    offset_x: float = 0.0
    offset_y: float = 0.0
    use_falloff: bool = False

    def validated(self) -> MapData:
        """Return a copy with out-of-range values clamped."""
        return replace(
            self,
            scale=max(self.scale, 0.0),
            octaves=max(self.octaves, 1),
            lacunarity=max(self.lacunarity, 1.0),
        )


def _lattice(ix: int, iy: int, seed: int) -> float:
    digest = xxhash.xxh64(struct.pack("<qq", ix, iy), seed=seed).intdigest()
    return (digest >> 11) * _FLOAT_SCALE


def _smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


def value_noise(x: float, y: float, seed: int = 0) -> float:
    """Smoothly interpolated lattice noise in [0, 1)."""
    seed &= _MASK64
    x0 = math.floor(x)
    y0 = math.floor(y)
    tx = _smoothstep(x - x0)
    ty = _smoothstep(y - y0)

    v00 = _lattice(x0, y0, seed)
    v10 = _lattice(x0 + 1, y0, seed)
    v01 = _lattice(x0, y0 + 1, seed)
    v11 = _lattice(x0 + 1, y0 + 1, seed)

    top = v00 + (v10 - v00) * tx
    bottom = v01 + (v11 - v01) * tx
    return top + (bottom - top) * ty


def _inverse_lerp(a: float, b: float, value: float) -> float:
    if a == b:
        return 0.0
    return min(max((value - a) / (b - a), 0.0), 1.0)


def generate_noise_map(width: int, height: int, map_data: MapData) -> HeightMap:
    """Build a normalized layered-noise heightmap of *width* x *height*."""
    data = map_data.validated()
    rng = RandomSource(data.seed if data.seed != 0 else _ZERO_SEED_SUBSTITUTE)

    octave_offsets: list[tuple[float, float]] = []
    for _ in range(data.octaves):
        ox = rng.next_int(-_OFFSET_RANGE, _OFFSET_RANGE) + data.offset_x
        oy = rng.next_int(-_OFFSET_RANGE, _OFFSET_RANGE) + data.offset_y
        octave_offsets.append((ox, oy))

    # A zero scale would divide sample points by zero.
    scale = data.scale if data.scale > 0 else _MIN_SCALE

    half_w = width / 2.0
    half_h = height / 2.0
    noise_map = HeightMap(width, height)
    lo = math.inf
    hi = -math.inf

    for y in range(height):
        for x in range(width):
            amplitude = 1.0
            frequency = 1.0
            noise_height = 0.0
            for ox, oy in octave_offsets:
                sx = (x - half_w) / scale * frequency + ox
                sy = (y - half_h) / scale * frequency + oy
                sample = value_noise(sx, sy, data.seed) * 2.0 - 1.0
                noise_height += sample * amplitude
                amplitude *= data.persistence
                frequency *= data.lacunarity
            lo = min(lo, noise_height)
            hi = max(hi, noise_height)
            noise_map.set(x, y, noise_height)

    for y in range(height):
        for x in range(width):
            noise_map.set(x, y, _inverse_lerp(lo, hi, noise_map.get(x, y)))

    if data.use_falloff:
        apply_falloff(noise_map, generate_falloff_map(width, height))

    logger.debug(
        "Noise map %dx%d (seed=%d, octaves=%d, raw range %.3f..%.3f)",
        width, height, data.seed, data.octaves, lo, hi,
    )
    return noise_map


def _falloff_curve(v: float) -> float:
    a = v ** _FALLOFF_A
    return a / (a + (_FALLOFF_B - _FALLOFF_B * v) ** _FALLOFF_A)


def generate_falloff_map(width: int, height: int | None = None) -> HeightMap:
    """Square-edged falloff: 0 in the centre rising to ~1 at the border."""
    if height is None:
        height = width
    falloff = HeightMap(width, height)
    for y in range(height):
        for x in range(width):
            u = x / width * 2.0 - 1.0
            v = y / height * 2.0 - 1.0
            falloff.set(x, y, _falloff_curve(max(abs(u), abs(v))))
    return falloff


def apply_falloff(noise_map: HeightMap, falloff: HeightMap) -> HeightMap:
    """Subtract *falloff* from *noise_map* in place, clamped to [0, 1]."""
    if (noise_map.width, noise_map.height) != (falloff.width, falloff.height):
        raise ValueError(
            f"Falloff size {falloff.width}x{falloff.height} does not match "
            f"map size {noise_map.width}x{noise_map.height}"
        )
    for y in range(noise_map.height):
        for x in range(noise_map.width):
            noise_map.set(x, y, min(max(noise_map.get(x, y) - falloff.get(x, y), 0.0), 1.0))
    return noise_map
