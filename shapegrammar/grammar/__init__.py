"""Grammar layer: the Shape symbol and its shared context."""

from shapegrammar.grammar.context import GrammarContext
from shapegrammar.grammar.shape import RuleShape, Shape

__all__ = ["GrammarContext", "RuleShape", "Shape"]
