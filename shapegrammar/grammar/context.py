"""GrammarContext — the arena every shape in a grammar tree resolves through.

The context owns the scene, the template library, the ambient random
source, the regeneration scheduler, and the registry of live shapes keyed
by node id. Shapes hold only integer keys (their own ``node_id`` and their
``root_id``) and look everything else up here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from shapegrammar.core.enums import NodeKind
from shapegrammar.core.models import IDENTITY, ZERO, Quaternion, Vector3
from shapegrammar.core.scene import Scene, SceneNode, TemplateLibrary
from shapegrammar.engine.scheduler import RegenerationScheduler
from shapegrammar.grammar.shape import check_shape_kind
from shapegrammar.systems.rng import RandomSource

if TYPE_CHECKING:
    from shapegrammar.grammar.shape import Shape

logger = logging.getLogger(__name__)

S = TypeVar("S", bound="Shape")


class GrammarContext:
    """Owner of all grammar-wide state.

    ``live`` plays the role of a running application: delayed regeneration
    is only scheduled while it is set, otherwise expansion is synchronous.
    """

    __slots__ = (
        "scene",
        "templates",
        "default_random",
        "scheduler",
        "eager_expansion",
        "live",
        "_shapes",
    )

    def __init__(
        self,
        scene: Scene | None = None,
        templates: TemplateLibrary | None = None,
        default_random: RandomSource | None = None,
        eager_expansion: bool = True,
    ) -> None:
        self.scene = scene or Scene()
        self.templates = templates or TemplateLibrary()
        # Ambient fallback for roots without their own RandomSource.
        self.default_random = default_random or RandomSource(0)
        self.scheduler = RegenerationScheduler()
        self.eager_expansion = eager_expansion
        self.live = False
        self._shapes: dict[int, Shape] = {}
        self.scene.subscribe_destroy(self._on_node_destroyed)

    # -- registry --

    def bind(self, shape: Shape, node: SceneNode, root_id: int | None) -> None:
        """Attach *shape* to *node* and register it under the node's id."""
        shape._context = self
        shape._node = node
        shape._root_id = node.node_id if root_id is None else root_id
        node.shape = shape
        node.kind = NodeKind.SYMBOL
        self._shapes[node.node_id] = shape

    def shape(self, node_id: int | None) -> Shape | None:
        if node_id is None:
            return None
        return self._shapes.get(node_id)

    def shapes(self) -> list[Shape]:
        return list(self._shapes.values())

    @property
    def shape_count(self) -> int:
        return len(self._shapes)

    def _on_node_destroyed(self, node: SceneNode) -> None:
        if node.shape is None:
            return
        self._shapes.pop(node.node_id, None)
        self.scheduler.cancel(node.node_id)

    # -- roots --

    def create_root(
        self,
        kind: type[S],
        name: str,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
        parent: SceneNode | None = None,
        random_source: RandomSource | None = None,
        **params,
    ) -> S:
        """Create the start symbol of a grammar. It is not expanded yet."""
        check_shape_kind(kind)
        root = kind(**params)
        node = self.scene.create_node(
            name, parent, local_position, local_rotation, kind=NodeKind.SYMBOL,
        )
        self.bind(root, node, root_id=None)
        if random_source is not None:
            root.add_component(random_source)
        logger.info("Created grammar root '%s' (%s, node #%d)", name, kind.__name__, node.node_id)
        return root

    def clear(self) -> None:
        """Destroy every node in the scene and drop pending expansions."""
        self.scheduler.clear()
        self.scene.clear()
        self._shapes.clear()
