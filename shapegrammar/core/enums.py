"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class ShapeState(IntEnum):
    """Lifecycle of a shape's generated-entity list.

    CLEARED and UNINITIALIZED behave the same: the list is empty.
    """

    UNINITIALIZED = 0
    EXPANDED = 1
    CLEARED = 2


@unique
class NodeKind(IntEnum):
    """What a scene node holds."""

    EMPTY = 0
    SYMBOL = 1      # carries a Shape
    TERMINAL = 2    # instantiated from a Template
