"""Bundled grammars and the registry that builds them by name."""

from shapegrammar.grammars.city import Block, Building, City, Roof, Stack, city_templates
from shapegrammar.grammars.registry import GRAMMARS, GrammarDef, build_grammar, map_data_from_config

__all__ = [
    "Block",
    "Building",
    "City",
    "GRAMMARS",
    "GrammarDef",
    "Roof",
    "Stack",
    "build_grammar",
    "city_templates",
    "map_data_from_config",
]
