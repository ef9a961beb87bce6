"""Utilities: logging setup and the generation event feed."""

from shapegrammar.utils.event_log import EventLog, GenerationEvent
from shapegrammar.utils.logging import setup_logging

__all__ = ["EventLog", "GenerationEvent", "setup_logging"]
