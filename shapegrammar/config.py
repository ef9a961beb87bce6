"""Generation configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GrammarConfig:
    """Immutable configuration for a generation run."""

    # Grammar
    grammar: str = "city"
    seed: int = 12345                      # 0 = nondeterministic
    eager_expansion: bool = True           # expand children inside create_symbol

    # Trigger
    build_on_start: bool = True
    regenerate_delay: float = 0.0          # seconds between delete and expand

    # Loop
    tick_rate: float = 0.05                # seconds between ticks (20 tps)
    max_ticks: int | None = None           # None = run until stopped

    # City grammar
    city_blocks_x: int = 4
    city_blocks_y: int = 4
    city_block_size: float = 12.0
    city_max_floors: int = 6
    city_empty_lot_chance: float = 0.15
    city_water_level: float = 0.3

    # Heightmap
    use_heightmap: bool = False
    map_width: int = 64
    map_height: int = 64
    noise_scale: float = 50.0
    noise_octaves: int = 4
    noise_persistence: float = 0.5
    noise_lacunarity: float = 2.0
    noise_offset_x: float = 0.0
    noise_offset_y: float = 0.0
    use_falloff: bool = False

    # Logging
    log_level: str = "INFO"
