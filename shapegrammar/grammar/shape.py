"""Shape — the grammar symbol.

Subclass ``Shape`` and implement ``expand()`` to define a production rule,
or attach a plain callable to a ``RuleShape``. From ``expand()`` create
non-terminal symbols with ``create_symbol`` and terminal content with
``spawn_prefab``; anything created another way is not tracked and will not
be cleaned up by ``delete_generated``.
"""

from __future__ import annotations

import abc
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Sequence, TypeVar

from shapegrammar.core.enums import NodeKind, ShapeState
from shapegrammar.core.models import IDENTITY, ZERO, Quaternion, Vector3
from shapegrammar.core.scene import Template
from shapegrammar.systems.rng import RandomSource

if TYPE_CHECKING:
    from shapegrammar.core.scene import SceneNode
    from shapegrammar.grammar.context import GrammarContext

logger = logging.getLogger(__name__)

S = TypeVar("S", bound="Shape")
T = TypeVar("T")
C = TypeVar("C")


def check_shape_kind(kind: Any) -> None:
    """Raise TypeError unless *kind* is a concrete Shape subclass."""
    if not (isinstance(kind, type) and issubclass(kind, Shape)):
        raise TypeError(f"{kind!r} is not a Shape subclass")
    if inspect.isabstract(kind):
        raise TypeError(f"{kind.__name__} is abstract and cannot be instantiated")


class Shape(abc.ABC):
    """A grammar symbol bound to a scene node.

    Every shape knows the root of the grammar tree it belongs to through
    ``root_id``, a key into the shared ``GrammarContext``. The root is where
    grammar-wide components live, e.g. a seeded ``RandomSource``.
    """

    def __init__(self) -> None:
        self._context: GrammarContext | None = None
        self._node: SceneNode | None = None
        self._root_id: int | None = None
        self._generated: list[SceneNode] | None = None
        self._components: list[Any] = []
        self._state = ShapeState.UNINITIALIZED

    # -- identity --

    @property
    def context(self) -> GrammarContext:
        if self._context is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a GrammarContext")
        return self._context

    @property
    def node(self) -> SceneNode:
        if self._node is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a scene node")
        return self._node

    @property
    def node_id(self) -> int:
        return self.node.node_id

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def root_id(self) -> int:
        return self.node_id if self._root_id is None else self._root_id

    @property
    def root(self) -> Shape:
        """The start symbol this shape was (transitively) created from."""
        root = self.context.shape(self._root_id)
        return self if root is None else root

    @property
    def alive(self) -> bool:
        return self._node is not None and self._node.alive

    @property
    def state(self) -> ShapeState:
        return self._state

    @property
    def number_of_generated_objects(self) -> int:
        return len(self._generated) if self._generated is not None else 0

    @property
    def generated(self) -> tuple[SceneNode, ...]:
        return tuple(self._generated or ())

    # -- components --

    def add_component(self, component: C) -> C:
        self._components.append(component)
        return component

    def get_component(self, cls: type[C]) -> C | None:
        for component in self._components:
            if isinstance(component, cls):
                return component
        return None

    def remove_component(self, component: Any) -> None:
        if component in self._components:
            self._components.remove(component)

    # -- creation --

    def create_symbol(
        self,
        kind: type[S],
        name: str,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
        parent: SceneNode | None = None,
        **params: Any,
    ) -> S:
        """Create a non-terminal child symbol of type *kind*.

        The child is parented under *parent* (default: this shape's node),
        shares this shape's root, and is tracked for cleanup. With eager
        expansion on, its production rule runs before this call returns.
        """
        check_shape_kind(kind)
        ctx = self.context
        child = kind(**params)
        if parent is None:
            parent = self.node
        node = ctx.scene.create_node(
            name, parent, local_position, local_rotation, kind=NodeKind.SYMBOL,
        )
        self.add_generated(node)
        ctx.bind(child, node, root_id=self.root_id)
        logger.debug("%s created symbol %s '%s' at %r", self.name, kind.__name__, name, local_position)
        if ctx.eager_expansion:
            child._run_expansion()
        return child

    def spawn_prefab(
        self,
        template: Template | str,
        local_position: Vector3 = ZERO,
        local_rotation: Quaternion = IDENTITY,
        parent: SceneNode | None = None,
    ) -> SceneNode:
        """Instantiate a terminal template and track it for cleanup."""
        ctx = self.context
        if isinstance(template, str):
            template = ctx.templates.get(template)
        if parent is None:
            parent = self.node
        node = ctx.scene.instantiate(template, parent, local_position, local_rotation)
        return self.add_generated(node)

    def add_generated(self, node: SceneNode) -> SceneNode:
        """Track *node* as generated by this shape.

        ``create_symbol`` and ``spawn_prefab`` call this for you.
        """
        if self._generated is None:
            self._generated = []
        self._generated.append(node)
        return node

    # -- lifecycle --

    def generate(self, delay: float = 0.0) -> None:
        """Delete everything generated so far and run the rule again.

        With a positive *delay* in a live context the expansion is queued on
        the scheduler; deletion always happens now. A newer call replaces a
        pending expansion of the same shape.
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delete_generated()
        ctx = self.context
        ctx.scheduler.cancel(self.node_id)
        if delay == 0 or not ctx.live:
            self._run_expansion()
        else:
            ctx.scheduler.schedule(self, delay)

    def delete_generated(self) -> None:
        """Destroy every generated object, depth first.

        Shapes among the generated objects clear their own content first, so
        content parented outside this shape's node is reached too. Objects
        already destroyed elsewhere are skipped. Safe to call repeatedly.
        """
        if self._generated is None:
            return

        scene = self.context.scene
        generated, self._generated = self._generated, []
        for node in generated:
            if not node.alive:
                continue
            try:
                if node.shape is not None:
                    node.shape.delete_generated()
                scene.destroy(node)
            except Exception:
                logger.warning("%s: cleanup of %r failed", self.name, node, exc_info=True)
        self._state = ShapeState.CLEARED

    def _run_expansion(self) -> None:
        self._state = ShapeState.EXPANDED
        self.expand()

    @abc.abstractmethod
    def expand(self) -> None:
        """Apply this symbol's production rule.

        Typically calls ``create_symbol`` for non-terminals and
        ``spawn_prefab`` for terminals, choosing between alternatives with
        the random helpers below.
        """

    # -- randomness --

    def _random_source(self) -> RandomSource:
        rnd = self.root.get_component(RandomSource)
        if rnd is None:
            return self.context.default_random
        return rnd

    def random_int(self, min_value: int, max_value: int | None = None) -> int:
        """Random integer in [0, min_value) or [min_value, max_value)."""
        return self._random_source().next_int(min_value, max_value)

    def random_float(self) -> float:
        """Random float in [0, 1)."""
        return self._random_source().next_float()

    def select_random(self, items: Sequence[T]) -> T:
        """Pick one element of *items* uniformly."""
        if len(items) == 0:
            raise IndexError("select_random() from an empty sequence")
        return items[self.random_int(len(items))]

    def __repr__(self) -> str:
        if self._node is None:
            return f"<{type(self).__name__} unbound>"
        return f"<{type(self).__name__} '{self._node.name}' #{self._node.node_id} {self._state.name}>"


class RuleShape(Shape):
    """A shape whose production rule is a plain callable.

    Extra keyword arguments are kept in ``params`` for the rule to read.
    """

    def __init__(self, rule: Callable[[RuleShape], None], **params: Any) -> None:
        super().__init__()
        self.rule = rule
        self.params = params

    def expand(self) -> None:
        self.rule(self)
