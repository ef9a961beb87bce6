"""Registry of named grammars and the builder that wires one up."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from shapegrammar.core.scene import TemplateLibrary
from shapegrammar.grammars.city import City, city_templates
from shapegrammar.systems.rng import RandomSource
from shapegrammar.terrain.noise import MapData, generate_noise_map

if TYPE_CHECKING:
    from shapegrammar.config import GrammarConfig
    from shapegrammar.grammar.context import GrammarContext
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GrammarDef:
    """How to build a named grammar: root kind, templates, root params."""

    name: str
    root_kind: type
    templates: Callable[[], TemplateLibrary]
    params: Callable[[GrammarConfig], dict[str, Any]]
    description: str = ""


def _city_params(config: GrammarConfig) -> dict[str, Any]:
    return {
        "blocks_x": config.city_blocks_x,
        "blocks_y": config.city_blocks_y,
        "block_size": config.city_block_size,
        "max_floors": config.city_max_floors,
        "empty_lot_chance": config.city_empty_lot_chance,
        "water_level": config.city_water_level,
    }


GRAMMARS: dict[str, GrammarDef] = {
    "city": GrammarDef(
        name="city",
        root_kind=City,
        templates=city_templates,
        params=_city_params,
        description="Blocks of stacked buildings with roofs and parks.",
    ),
}


def map_data_from_config(config: GrammarConfig) -> MapData:
    return MapData(
        scale=config.noise_scale,
        octaves=config.noise_octaves,
        persistence=config.noise_persistence,
        lacunarity=config.noise_lacunarity,
        seed=config.seed,
        offset_x=config.noise_offset_x,
        offset_y=config.noise_offset_y,
        use_falloff=config.use_falloff,
    )


def build_grammar(context: GrammarContext, config: GrammarConfig) -> Shape:
    """Create the root of ``config.grammar`` in *context* (not yet expanded).

    The root gets a RandomSource seeded from the config and, if enabled, a
    HeightMap component.
    """
    try:
        gdef = GRAMMARS[config.grammar]
    except KeyError:
        raise KeyError(f"Unknown grammar '{config.grammar}' (known: {sorted(GRAMMARS)})") from None

    context.templates.update(gdef.templates())

    root = context.create_root(
        gdef.root_kind, gdef.name.capitalize(),
        random_source=RandomSource(config.seed),
        **gdef.params(config),
    )
    if config.use_heightmap:
        heightmap = generate_noise_map(config.map_width, config.map_height, map_data_from_config(config))
        root.add_component(heightmap)
        logger.info("Attached %dx%d heightmap to '%s'", heightmap.width, heightmap.height, root.name)
    return root
