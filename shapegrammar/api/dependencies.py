"""FastAPI dependency: the EngineManager installed by the app lifespan."""

from __future__ import annotations

from shapegrammar.api.engine_manager import EngineManager

_engine_manager: EngineManager | None = None


def set_engine_manager(manager: EngineManager | None) -> None:
    """Install *manager* for request handlers, or uninstall it with None."""
    global _engine_manager
    _engine_manager = manager


def get_engine_manager() -> EngineManager:
    if _engine_manager is None:
        raise RuntimeError("No grammar engine is running; start the app through its lifespan.")
    return _engine_manager
