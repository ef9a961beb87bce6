"""Immutable snapshot of a grammar tree for reader threads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shapegrammar.core.enums import NodeKind

if TYPE_CHECKING:
    from shapegrammar.core.scene import SceneNode
    from shapegrammar.grammar.context import GrammarContext
    from shapegrammar.grammar.shape import Shape


@dataclass(frozen=True, slots=True)
class NodeSnapshot:
    node_id: int
    name: str
    kind: str
    parent_id: int | None
    position: tuple[float, float, float]
    rotation: tuple[float, float, float, float]
    world_position: tuple[float, float, float]
    template_id: str | None = None
    shape_type: str | None = None
    state: str | None = None
    generated_count: int = 0


@dataclass(frozen=True, slots=True)
class TreeSnapshot:
    """Read-only copy of the scene under one grammar root."""

    tick: int
    seed: int
    root_id: int
    nodes: tuple[NodeSnapshot, ...]
    pending_expansions: int

    @classmethod
    def from_root(cls, context: GrammarContext, root: Shape, tick: int, seed: int) -> TreeSnapshot:
        nodes = tuple(_snapshot_node(context, node) for node in _reachable(root.node))
        return cls(
            tick=tick,
            seed=seed,
            root_id=root.node_id,
            nodes=nodes,
            pending_expansions=context.scheduler.pending,
        )

    @property
    def symbol_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind == NodeKind.SYMBOL.name)

    @property
    def terminal_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind == NodeKind.TERMINAL.name)


def _snapshot_node(context: GrammarContext, node: SceneNode) -> NodeSnapshot:
    shape = node.shape
    return NodeSnapshot(
        node_id=node.node_id,
        name=node.name,
        kind=node.kind.name,
        parent_id=node.parent.node_id if node.parent is not None else None,
        position=node.local_position.as_tuple(),
        rotation=node.local_rotation.as_tuple(),
        world_position=context.scene.world_position(node).as_tuple(),
        template_id=node.template_id,
        shape_type=type(shape).__name__ if shape is not None else None,
        state=shape.state.name if shape is not None else None,
        generated_count=shape.number_of_generated_objects if shape is not None else 0,
    )


def _reachable(start: SceneNode) -> list[SceneNode]:
    """Pre-order scene walk that also follows each shape's generated list.

    Content a shape spawned under a foreign parent follows that shape's own
    scene subtree.
    """
    seen: set[int] = set()
    order: list[SceneNode] = []
    stack = [start]
    while stack:
        node = stack.pop()
        if node.node_id in seen or not node.alive:
            continue
        seen.add(node.node_id)
        order.append(node)
        extra = list(node.shape.generated) if node.shape is not None else []
        # Reversed so scene children pop first, in order.
        stack.extend(reversed(node.children + extra))
    return order
