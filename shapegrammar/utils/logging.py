"""Logging setup shared by the server and the headless CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

# Third-party loggers that flood the output at INFO.
_NOISY_LOGGERS = ("uvicorn.access", "watchfiles")


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure the root logger for generation output.

    Logs go to *stream* (stdout by default). Per-request access logs are
    kept at WARNING unless *level* is DEBUG.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)-5s] %(name)-32s | %(message)s",
        datefmt="%H:%M:%S",
    ))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    quiet = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
