"""Terrain collaborator: layered value noise heightmaps."""

from shapegrammar.terrain.heightmap import HeightMap
from shapegrammar.terrain.noise import (
    MapData,
    apply_falloff,
    generate_falloff_map,
    generate_noise_map,
)

__all__ = ["HeightMap", "MapData", "apply_falloff", "generate_falloff_map", "generate_noise_map"]
