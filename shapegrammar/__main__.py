"""Entry point: ``python -m shapegrammar``.

Supports two modes:
  - ``python -m shapegrammar``            → Launch FastAPI server (regenerate over HTTP)
  - ``python -m shapegrammar cli``        → Headless generation, prints the tree
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapegrammar.core.scene import SceneNode

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Procedural Shape Grammar Engine")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI regeneration server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--grammar", type=str, default="city")
    srv.add_argument("--seed", type=int, default=12345, help="0 = nondeterministic")
    srv.add_argument("--heightmap", action="store_true", help="Attach a noise heightmap to the root")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Generate once (or N times) and print the tree")
    cli.add_argument("--grammar", type=str, default="city")
    cli.add_argument("--seed", type=int, default=12345, help="0 = nondeterministic")
    cli.add_argument("--delay", type=float, default=0.0, help="Seconds between delete and expand")
    cli.add_argument("--builds", type=int, default=1, help="Number of regenerations to trigger")
    cli.add_argument("--ticks", type=int, default=20, help="Tick budget after the builds; pending expansions still finish")
    cli.add_argument("--heightmap", action="store_true", help="Attach a noise heightmap to the root")
    cli.add_argument("--depth", type=int, default=3, help="Tree depth to print")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from shapegrammar.api.app import create_app
    from shapegrammar.config import GrammarConfig

    config = GrammarConfig(
        grammar=args.grammar,
        seed=args.seed,
        use_heightmap=args.heightmap,
        log_level=args.log_level,
    )
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _print_tree(node: SceneNode, depth: int, indent: int = 0) -> None:
    shape = node.shape
    label = f"{node.name} [{type(shape).__name__}: {shape.number_of_generated_objects}]" if shape else node.name
    print("  " * indent + label)
    if indent >= depth:
        return
    for child in node.children:
        _print_tree(child, depth, indent + 1)


def _run_cli(args: argparse.Namespace) -> None:
    from shapegrammar.config import GrammarConfig
    from shapegrammar.engine.generation_loop import GenerationLoop
    from shapegrammar.engine.trigger import BuildTrigger
    from shapegrammar.grammar.context import GrammarContext
    from shapegrammar.grammars.registry import build_grammar
    from shapegrammar.utils.logging import setup_logging

    config = GrammarConfig(
        grammar=args.grammar,
        seed=args.seed,
        regenerate_delay=args.delay,
        build_on_start=False,
        max_ticks=args.ticks,
        use_heightmap=args.heightmap,
        log_level=args.log_level,
    )

    # The tree goes to stdout; keep logs out of it.
    setup_logging(config.log_level, stream=sys.stderr)

    context = GrammarContext(eager_expansion=config.eager_expansion)
    root = build_grammar(context, config)
    trigger = BuildTrigger(root)
    loop = GenerationLoop(config, context, trigger)

    loop.start()
    for _ in range(args.builds):
        loop.request(delay=config.regenerate_delay)
    try:
        # Scheduled expansions always run, even past the tick budget.
        while True:
            within_budget = loop.tick_once()
            if not context.scheduler.pending and loop.requests.empty:
                break
            if not within_budget and loop.tick == args.ticks:
                logger.warning(
                    "Tick budget of %d spent with %d expansions pending; ticking until they run.",
                    args.ticks, context.scheduler.pending,
                )
    finally:
        loop.stop()

    _print_tree(root.node, args.depth)
    logger.info(
        "Done. %d shapes, %d scene nodes after %d builds.",
        context.shape_count, context.scene.node_count, trigger.builds,
    )


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
