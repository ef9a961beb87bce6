"""Tests for EngineManager, the REST route handlers and the CLI entry point."""

import contextlib
import io
import logging
import unittest

from fastapi import HTTPException

from shapegrammar.__main__ import _build_parser, _print_tree, _run_cli
from shapegrammar.api.engine_manager import EngineManager
from shapegrammar.api.routes import config as config_routes
from shapegrammar.api.routes import control, state
from shapegrammar.config import GrammarConfig
from shapegrammar.utils.logging import setup_logging


def _build_manager(**overrides):
    cfg = GrammarConfig(city_blocks_x=2, city_blocks_y=2, **overrides)
    return EngineManager(cfg)


class TestEngineManager(unittest.TestCase):
    def setUp(self):
        self.mgr = _build_manager()

    def tearDown(self):
        self.mgr.stop()

    def test_snapshot_after_build(self):
        snap = self.mgr.get_snapshot()
        self.assertIsNotNone(snap)
        self.assertEqual(snap.seed, 12345)
        self.assertEqual(snap.tick, 0)
        self.assertGreater(snap.terminal_count, 0)
        self.assertEqual(self.mgr.loop.trigger.builds, 1)

    def test_regenerate_runs_on_next_step(self):
        self.mgr.regenerate(seed=99)
        self.assertEqual(self.mgr.get_snapshot().seed, 12345)

        self.assertTrue(self.mgr.step())
        snap = self.mgr.get_snapshot()
        self.assertEqual(snap.seed, 99)
        self.assertEqual(snap.tick, 1)
        self.assertEqual(self.mgr.loop.trigger.builds, 2)

    def test_delayed_regenerate(self):
        self.mgr.regenerate(delay=0.1)
        self.mgr.step(0.0)
        self.assertEqual(self.mgr.get_snapshot().pending_expansions, 1)
        self.mgr.step(0.1)
        self.assertEqual(self.mgr.get_snapshot().pending_expansions, 0)

    def test_negative_delay_rejected(self):
        with self.assertRaises(ValueError):
            self.mgr.regenerate(delay=-1.0)

    def test_same_seed_same_snapshot(self):
        other = _build_manager()
        a = [(n.name, n.template_id, n.world_position) for n in self.mgr.get_snapshot().nodes]
        b = [(n.name, n.template_id, n.world_position) for n in other.get_snapshot().nodes]
        self.assertEqual(a, b)

    def test_reset_rebuilds(self):
        self.mgr.regenerate(seed=5)
        self.mgr.step()
        self.mgr.reset()
        snap = self.mgr.get_snapshot()
        self.assertEqual(snap.seed, 12345)
        self.assertEqual(snap.tick, 0)
        self.assertEqual(len(self.mgr.event_log), 1)

    def test_unbounded_by_default(self):
        self.assertIsNone(GrammarConfig().max_ticks)

    def test_regenerate_after_tick_limit(self):
        mgr = _build_manager(max_ticks=3, build_on_start=False)
        for _ in range(3):
            mgr.step()
        mgr.regenerate(seed=7)
        mgr.step()
        snap = mgr.get_snapshot()
        self.assertEqual(snap.seed, 7)
        self.assertGreater(snap.terminal_count, 0)
        self.assertTrue(mgr.loop.requests.empty)

    def test_tick_rate_clamped(self):
        self.mgr.tick_rate = 10.0
        self.assertEqual(self.mgr.tick_rate, 2.0)
        self.mgr.tick_rate = 0.0
        self.assertEqual(self.mgr.tick_rate, 0.01)

    def test_background_thread_start_stop(self):
        self.mgr.start()
        self.assertTrue(self.mgr.running)
        with self.assertRaises(RuntimeError):
            self.mgr.step()
        self.mgr.stop()
        self.assertFalse(self.mgr.running)


class TestRoutes(unittest.TestCase):
    def setUp(self):
        self.mgr = _build_manager()

    def tearDown(self):
        self.mgr.stop()

    def test_state(self):
        resp = state.get_state(manager=self.mgr)
        snap = self.mgr.get_snapshot()
        self.assertEqual(resp.root_id, snap.root_id)
        self.assertEqual(len(resp.nodes), len(snap.nodes))
        self.assertEqual(resp.nodes[0].shape_type, "City")

    def test_regenerate_then_step(self):
        resp = control.regenerate(seed=7, delay=0.0, manager=self.mgr)
        self.assertEqual(resp.status, "ok")
        resp = control.control(action=control.ControlAction.step, manager=self.mgr)
        self.assertEqual(resp.tick, 1)
        self.assertEqual(state.get_state(manager=self.mgr).seed, 7)

    def test_control_noops(self):
        resp = control.control(action=control.ControlAction.stop, manager=self.mgr)
        self.assertEqual(resp.status, "noop")

    def test_events(self):
        events = state.get_events(since_tick=None, limit=50, manager=self.mgr)
        self.assertEqual([e.category for e in events], ["build"])
        self.assertEqual(state.get_events(since_tick=5, limit=50, manager=self.mgr), [])

    def test_config(self):
        resp = config_routes.get_config(manager=self.mgr)
        self.assertEqual(resp.grammar, "city")
        self.assertEqual(resp.seed, 12345)

    def test_state_without_snapshot(self):
        self.mgr._latest_snapshot = None
        with self.assertRaises(HTTPException) as ctx:
            state.get_state(manager=self.mgr)
        self.assertEqual(ctx.exception.status_code, 503)


class TestCli(unittest.TestCase):
    def test_parser_defaults(self):
        args = _build_parser().parse_args(["cli"])
        self.assertEqual(args.seed, 12345)
        self.assertEqual(args.builds, 1)
        self.assertFalse(args.heightmap)

    def test_cli_prints_tree(self):
        args = _build_parser().parse_args(
            ["cli", "--seed", "3", "--builds", "2", "--depth", "1", "--log-level", "WARNING"]
        )
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            _run_cli(args)
        lines = out.getvalue().splitlines()
        self.assertTrue(lines[0].startswith("City [City: 16]"))
        self.assertTrue(all(line.startswith("  ") for line in lines[1:]))

    def test_cli_waits_for_delay_past_tick_budget(self):
        args = _build_parser().parse_args(
            ["cli", "--delay", "2.0", "--ticks", "20", "--depth", "0", "--log-level", "WARNING"]
        )
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            _run_cli(args)
        self.assertEqual(out.getvalue().splitlines(), ["City [City: 16]"])

    def test_print_tree_is_annotated(self):
        self.assertEqual(_print_tree.__annotations__["node"], "SceneNode")

    def test_logging_setup(self):
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)
        logging.getLogger("shapegrammar.test").info("hello")
        self.assertIn("hello", stream.getvalue())
        self.assertEqual(logging.getLogger("uvicorn.access").level, logging.WARNING)
        setup_logging("DEBUG", stream=stream)
        self.assertEqual(logging.getLogger("uvicorn.access").level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
