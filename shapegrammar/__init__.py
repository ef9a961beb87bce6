"""Procedural content generation with a recursive shape grammar."""

from shapegrammar.config import GrammarConfig
from shapegrammar.grammar.context import GrammarContext
from shapegrammar.grammar.shape import RuleShape, Shape
from shapegrammar.systems.rng import RandomSource

__version__ = "0.1.0"

__all__ = ["GrammarConfig", "GrammarContext", "RandomSource", "RuleShape", "Shape"]
