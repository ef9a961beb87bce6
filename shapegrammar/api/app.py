"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shapegrammar.api.dependencies import set_engine_manager
from shapegrammar.api.engine_manager import EngineManager
from shapegrammar.api.routes import api_router
from shapegrammar.config import GrammarConfig
from shapegrammar.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: GrammarConfig | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = GrammarConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        manager.start()
        logger.info("API server started — grammar '%s' loaded.", _config.grammar)
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Shape Grammar Engine",
        description=(
            "Procedural shape-grammar generator — regeneration and inspection API.\n\n"
            "## API Groups\n\n"
            "- **State** — The generated tree and the generation event feed\n"
            "- **Control** — Regenerate (optionally reseeded / delayed), start, stop, step, reset\n"
            "- **Config** — Read-only generation configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Snapshot of the scene under the grammar root, and recent generation events."},
            {"name": "Control", "description": "Regeneration trigger and generation loop lifecycle."},
            {"name": "Config", "description": "Read-only generation configuration parameters."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app
