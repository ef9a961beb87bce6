"""In-memory scene graph: nodes with local transforms, terminal templates.

The grammar engine treats every node it spawns as an opaque destroyable
handle. Destruction is immediate and cascades through scene children,
children first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator

from shapegrammar.core.enums import NodeKind
from shapegrammar.core.models import IDENTITY, ZERO, Quaternion, Vector3

if TYPE_CHECKING:
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Template:
    """Immutable description of terminal content (a prefab).

    ``parts`` are sub-templates instantiated as scene children, each at its
    own ``offset`` from the parent instance.
    """

    template_id: str
    name: str = ""
    parts: tuple[Template, ...] = ()
    offset: Vector3 = ZERO
    tags: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name or self.template_id


class TemplateLibrary:
    """Registry of terminal templates by id."""

    __slots__ = ("_templates",)

    def __init__(self, templates: list[Template] | None = None) -> None:
        self._templates: dict[str, Template] = {}
        for t in templates or ():
            self.register(t)

    def register(self, template: Template) -> Template:
        self._templates[template.template_id] = template
        return template

    def get(self, template_id: str) -> Template:
        try:
            return self._templates[template_id]
        except KeyError:
            raise KeyError(f"Unknown template '{template_id}'") from None

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def ids(self) -> list[str]:
        return sorted(self._templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(list(self._templates.values()))

    def update(self, other: TemplateLibrary) -> None:
        for template in other:
            self.register(template)


class SceneNode:
    """A transform in the scene: name, parent, children, local pose."""

    __slots__ = (
        "node_id",
        "name",
        "kind",
        "parent",
        "children",
        "local_position",
        "local_rotation",
        "template_id",
        "shape",
        "alive",
    )

    def __init__(
        self,
        node_id: int,
        name: str,
        kind: NodeKind = NodeKind.EMPTY,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
        template_id: str | None = None,
    ) -> None:
        self.node_id = node_id
        self.name = name
        self.kind = kind
        self.parent: SceneNode | None = None
        self.children: list[SceneNode] = []
        self.local_position = local_position
        self.local_rotation = local_rotation
        self.template_id = template_id
        self.shape: Shape | None = None
        self.alive = True

    def set_parent(self, parent: SceneNode | None) -> None:
        if self.parent is not None and self in self.parent.children:
            self.parent.children.remove(self)
        self.parent = parent
        if parent is not None:
            parent.children.append(self)

    def walk(self) -> Iterator[SceneNode]:
        """Pre-order iteration over this node and its scene descendants."""
        yield self
        for child in list(self.children):
            yield from child.walk()

    def find(self, name: str) -> SceneNode | None:
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def __repr__(self) -> str:
        state = "" if self.alive else " destroyed"
        return f"SceneNode#{self.node_id}({self.name!r}{state})"


@dataclass(slots=True)
class _SceneCounters:
    created: int = 0
    destroyed: int = 0


class Scene:
    """Owns every node. Nodes without a parent are scene roots."""

    __slots__ = ("_nodes", "_next_node_id", "_destroy_listeners", "_counters")

    def __init__(self) -> None:
        self._nodes: dict[int, SceneNode] = {}
        self._next_node_id: int = 1
        self._destroy_listeners: list[Callable[[SceneNode], None]] = []
        self._counters = _SceneCounters()

    # -- creation --

    def allocate_node_id(self) -> int:
        nid = self._next_node_id
        self._next_node_id += 1
        return nid

    def create_node(
        self,
        name: str,
        parent: SceneNode | None = None,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
        kind: NodeKind = NodeKind.EMPTY,
    ) -> SceneNode:
        if parent is not None and not parent.alive:
            raise ValueError(f"Cannot parent '{name}' under destroyed {parent!r}")
        node = SceneNode(
            self.allocate_node_id(), name, kind=kind,
            local_position=local_position, local_rotation=local_rotation,
        )
        node.set_parent(parent)
        self._nodes[node.node_id] = node
        self._counters.created += 1
        return node

    def instantiate(
        self,
        template: Template,
        parent: SceneNode | None = None,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
    ) -> SceneNode:
        """Copy *template* (and its parts) into the scene and return the handle."""
        node = self.create_node(
            template.display_name, parent, local_position, local_rotation,
            kind=NodeKind.TERMINAL,
        )
        node.template_id = template.template_id
        for part in template.parts:
            self.instantiate(part, node, part.offset)
        return node

    # -- destruction --

    def subscribe_destroy(self, callback: Callable[[SceneNode], None]) -> None:
        """Call *callback* with every node right before it is destroyed."""
        self._destroy_listeners.append(callback)

    def destroy(self, node: SceneNode) -> None:
        """Destroy *node* and its scene subtree immediately, children first.

        Nodes carrying a shape have their generated content torn down before
        the node goes away. Destroying a dead node is a no-op.

        A failing listener or child does not stop the teardown: the node is
        always detached and marked dead, then the first error is re-raised.
        """
        if not node.alive:
            return
        errors: list[Exception] = []
        if node.shape is not None:
            node.shape.delete_generated()
        for child in list(node.children):
            try:
                self.destroy(child)
            except Exception as exc:
                errors.append(exc)
        for callback in self._destroy_listeners:
            try:
                callback(node)
            except Exception as exc:
                errors.append(exc)
        node.set_parent(None)
        node.alive = False
        self._nodes.pop(node.node_id, None)
        self._counters.destroyed += 1
        if errors:
            raise errors[0]

    # -- queries --

    def get(self, node_id: int) -> SceneNode | None:
        return self._nodes.get(node_id)

    def roots(self) -> list[SceneNode]:
        return [n for n in self._nodes.values() if n.parent is None]

    def world_position(self, node: SceneNode) -> Vector3:
        """Compose local transforms up to the scene root."""
        pos = node.local_position
        parent = node.parent
        while parent is not None:
            pos = parent.local_rotation.rotate(pos) + parent.local_position
            parent = parent.parent
        return pos

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def total_created(self) -> int:
        return self._counters.created

    @property
    def total_destroyed(self) -> int:
        return self._counters.destroyed

    def clear(self) -> None:
        for node in self.roots():
            self.destroy(node)
        logger.debug("Scene cleared (%d nodes destroyed total)", self._counters.destroyed)
