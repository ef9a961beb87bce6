"""Core data models and scene representation."""

from shapegrammar.core.enums import NodeKind, ShapeState
from shapegrammar.core.models import IDENTITY, ZERO, Quaternion, Vector3
from shapegrammar.core.scene import Scene, SceneNode, Template, TemplateLibrary
from shapegrammar.core.snapshot import NodeSnapshot, TreeSnapshot

__all__ = [
    "IDENTITY",
    "NodeKind",
    "NodeSnapshot",
    "Quaternion",
    "Scene",
    "SceneNode",
    "ShapeState",
    "Template",
    "TemplateLibrary",
    "TreeSnapshot",
    "Vector3",
    "ZERO",
]
