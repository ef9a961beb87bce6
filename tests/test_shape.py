"""Tests for Shape — symbol creation, root propagation, cleanup protocol."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shapegrammar.core.enums import NodeKind, ShapeState
from shapegrammar.core.models import Quaternion, Vector3
from shapegrammar.grammar.shape import RuleShape, Shape
from shapegrammar.systems.rng import RandomSource
from tests.helpers.grammars import (
    PRIMITIVES,
    Empty,
    Holder,
    Leaf,
    Row,
    Tree,
    collect_shapes,
    describe,
    make_context,
)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

class TestCreateSymbol:
    def test_child_is_tracked_and_parented(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        child = root.create_symbol(Empty, "Child", Vector3(1.0, 2.0, 3.0))
        assert isinstance(child, Empty)
        assert root.number_of_generated_objects == 1
        assert root.generated[0] is child.node
        assert child.node.parent is root.node
        assert child.node.local_position == Vector3(1.0, 2.0, 3.0)
        assert child.node.kind == NodeKind.SYMBOL

    def test_default_rotation_is_identity(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        child = root.create_symbol(Empty, "Child")
        assert child.node.local_rotation == Quaternion()

    def test_explicit_parent(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        elsewhere = ctx.scene.create_node("Elsewhere")
        child = root.create_symbol(Empty, "Child", parent=elsewhere)
        assert child.node.parent is elsewhere
        assert root.generated == (child.node,)

    def test_params_reach_constructor(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        child = root.create_symbol(Tree, "T", depth=0)
        assert child.depth == 0

    def test_rejects_non_shape_kind(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        with pytest.raises(TypeError):
            root.create_symbol(int, "Nope")
        with pytest.raises(TypeError):
            root.create_symbol(Shape, "Abstract")
        assert root.number_of_generated_objects == 0

    def test_eager_expansion_runs_child_rule(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root", random_source=RandomSource(1))
        leaf = root.create_symbol(Leaf, "Leaf")
        assert leaf.state == ShapeState.EXPANDED
        assert leaf.number_of_generated_objects == 1

    def test_deferred_expansion_when_eager_off(self):
        ctx = make_context(eager_expansion=False)
        root = ctx.create_root(Empty, "Root", random_source=RandomSource(1))
        leaf = root.create_symbol(Leaf, "Leaf")
        assert leaf.state == ShapeState.UNINITIALIZED
        assert leaf.number_of_generated_objects == 0
        leaf.generate()
        assert leaf.number_of_generated_objects == 1


class TestSpawnPrefab:
    def test_spawn_by_id_and_by_template(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        a = root.spawn_prefab("cube", Vector3(1.0, 0.0, 0.0))
        b = root.spawn_prefab(ctx.templates.get("sphere"))
        assert a.template_id == "cube"
        assert b.template_id == "sphere"
        assert a.kind == NodeKind.TERMINAL
        assert root.number_of_generated_objects == 2

    def test_parts_are_copied_but_only_instance_tracked(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        pillar = root.spawn_prefab("pillar")
        assert [c.name for c in pillar.children] == ["Cap"]
        assert ctx.scene.world_position(pillar.children[0]) == Vector3(0.0, 2.0, 0.0)
        assert root.number_of_generated_objects == 1

    def test_unknown_template_raises(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        with pytest.raises(KeyError):
            root.spawn_prefab("no-such-thing")


# ---------------------------------------------------------------------------
# Root reference
# ---------------------------------------------------------------------------

class TestRootReference:
    def test_root_of_root_is_itself(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        assert root.root is root
        assert root.root_id == root.node_id

    def test_root_propagates_to_every_depth(self):
        ctx = make_context()
        root = ctx.create_root(Tree, "Tree", random_source=RandomSource(3), depth=4)
        root.generate()
        shapes = collect_shapes(root)
        assert len(shapes) > 3
        for shape in shapes:
            assert shape.root_id == root.node_id
            assert shape.root is root

    def test_root_components_visible_from_descendants(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        marker = root.add_component({"density": 0.5})
        child = root.create_symbol(Empty, "Child")
        grandchild = child.create_symbol(Empty, "Grandchild")
        assert grandchild.root.get_component(dict) is marker
        assert grandchild.get_component(dict) is None


# ---------------------------------------------------------------------------
# Randomness resolution
# ---------------------------------------------------------------------------

class TestRandomResolution:
    def test_descendants_draw_from_root_source(self):
        ctx = make_context()
        rnd = RandomSource(12)
        root = ctx.create_root(Empty, "Root", random_source=rnd)
        child = root.create_symbol(Empty, "Child")
        child.random_float()
        child.random_int(3)
        assert rnd.draws == 2
        assert ctx.default_random.draws == 0

    def test_falls_back_to_ambient_source(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        child = root.create_symbol(Empty, "Child")
        value = child.random_int(5, 10)
        assert 5 <= value < 10
        assert ctx.default_random.draws == 1

    def test_invalid_range_raises(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root", random_source=RandomSource(1))
        with pytest.raises(ValueError):
            root.random_int(4, 4)
        with pytest.raises(ValueError):
            root.random_int(0)

    def test_select_random_single_element(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root", random_source=RandomSource(1))
        assert all(root.select_random(["only"]) == "only" for _ in range(20))

    def test_select_random_empty_raises_index_error(self):
        ctx = make_context()
        rnd = RandomSource(1)
        root = ctx.create_root(Empty, "Root", random_source=rnd)
        with pytest.raises(IndexError):
            root.select_random([])
        assert rnd.draws == 0

    def test_select_random_covers_items(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root", random_source=RandomSource(1))
        picks = {root.select_random(PRIMITIVES) for _ in range(200)}
        assert picks == set(PRIMITIVES)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------

class TestDeleteGenerated:
    def test_no_op_before_first_expansion(self):
        ctx = make_context()
        root = ctx.create_root(Row, "Row")
        root.delete_generated()
        assert root.number_of_generated_objects == 0
        assert root.state == ShapeState.UNINITIALIZED

    def test_idempotent(self):
        ctx = make_context()
        root = ctx.create_root(Row, "Row", random_source=RandomSource(1))
        root.generate()
        nodes_after_expand = ctx.scene.node_count
        root.delete_generated()
        after_first = ctx.scene.node_count
        root.delete_generated()
        assert ctx.scene.node_count == after_first == 1
        assert nodes_after_expand > after_first
        assert root.number_of_generated_objects == 0
        assert root.state == ShapeState.CLEARED

    def test_recursive_counts_reach_zero(self):
        ctx = make_context()
        root = ctx.create_root(Tree, "Tree", random_source=RandomSource(21), depth=3)
        root.generate()
        shapes = collect_shapes(root)
        assert any(s.number_of_generated_objects for s in shapes[1:])
        root.delete_generated()
        assert all(s.number_of_generated_objects == 0 for s in shapes)
        assert all(not s.alive for s in shapes[1:])
        assert ctx.shape_count == 1

    def test_descendants_destroyed_before_child(self):
        ctx = make_context()
        elsewhere = ctx.scene.create_node("Elsewhere")
        root = ctx.create_root(Holder, "Root", target=elsewhere)
        root.generate()
        assert len(elsewhere.children) == 2

        order: list[str] = []
        ctx.scene.subscribe_destroy(lambda node: order.append(node.name))
        root.delete_generated()

        assert order == ["cube", "cube", "Scatter"]
        assert elsewhere.children == []
        assert elsewhere.alive

    def test_skips_entities_destroyed_out_of_band(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        a = root.spawn_prefab("cube")
        b = root.spawn_prefab("sphere")
        ctx.scene.destroy(a)
        root.delete_generated()
        assert not b.alive
        assert root.number_of_generated_objects == 0

    def test_cleanup_errors_are_suppressed(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        cube = root.spawn_prefab("cube")
        survivor = root.spawn_prefab("sphere")

        def explode(node):
            if node.template_id == "cube":
                raise RuntimeError("boom")

        ctx.scene.subscribe_destroy(explode)
        root.delete_generated()
        assert root.number_of_generated_objects == 0
        assert not survivor.alive
        assert not cube.alive
        assert root.node.children == []
        assert ctx.scene.get(cube.node_id) is None

    def test_failing_listener_does_not_leave_content_behind(self):
        ctx = make_context()
        root = ctx.create_root(Empty, "Root")
        pillar = root.spawn_prefab("pillar")
        cap = pillar.children[0]

        def explode(node):
            if node is cap:
                raise RuntimeError("boom")

        ctx.scene.subscribe_destroy(explode)
        with pytest.raises(RuntimeError, match="boom"):
            ctx.scene.destroy(pillar)
        assert not cap.alive
        assert not pillar.alive
        assert root.node.children == []
        ctx.scene.destroy(pillar)

    def test_destroying_symbol_node_tears_down_its_content(self):
        ctx = make_context()
        elsewhere = ctx.scene.create_node("Elsewhere")
        root = ctx.create_root(Holder, "Root", target=elsewhere)
        root.generate()
        scatter = root.generated[0]
        ctx.scene.destroy(scatter)
        assert elsewhere.children == []


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------

class TestGenerate:
    def test_counts_match_latest_expansion(self):
        ctx = make_context()
        root = ctx.create_root(Tree, "Tree", random_source=RandomSource(5), depth=3)
        root.generate()
        for shape in collect_shapes(root):
            assert shape.number_of_generated_objects == len(shape.node.children)

    def test_regenerate_replaces_previous_content(self):
        ctx = make_context()
        root = ctx.create_root(Row, "Row", random_source=RandomSource(1))
        root.generate()
        old = root.generated
        root.generate()
        assert root.number_of_generated_objects == 3
        assert all(not n.alive for n in old)
        assert not set(old) & set(root.generated)

    def test_scenario_three_children_reproducible(self):
        ctx = make_context()
        rnd = RandomSource(12345)
        root = ctx.create_root(Row, "Row", random_source=rnd)
        rnd.reset()
        root.generate()
        assert root.number_of_generated_objects == 3
        assert [n.name for n in root.generated] == ["A", "B", "C"]
        assert [n.local_position for n in root.generated] == [
            Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0), Vector3(2.0, 0.0, 0.0),
        ]
        first = describe(root, ctx)

        root.delete_generated()
        assert root.number_of_generated_objects == 0

        rnd.reset()
        root.generate()
        assert describe(root, ctx) == first

    def test_expand_errors_propagate_and_leave_partial_state(self):
        ctx = make_context()

        def broken(shape):
            shape.spawn_prefab("cube")
            raise RuntimeError("bad rule")

        root = ctx.create_root(RuleShape, "Rule", rule=broken)
        with pytest.raises(RuntimeError, match="bad rule"):
            root.generate()
        partial = root.generated
        assert len(partial) == 1

        root.rule = lambda shape: shape.spawn_prefab("sphere")
        root.generate()
        assert not partial[0].alive
        assert [n.template_id for n in root.generated] == ["sphere"]

    def test_negative_delay_rejected(self):
        ctx = make_context()
        root = ctx.create_root(Row, "Row")
        with pytest.raises(ValueError):
            root.generate(-1.0)

    def test_rule_shape_params(self):
        ctx = make_context()
        root = ctx.create_root(
            RuleShape, "Rule",
            rule=lambda s: [s.spawn_prefab("cube") for _ in range(s.params["n"])],
            n=4,
        )
        root.generate()
        assert root.number_of_generated_objects == 4
