"""GET /api/v1/config — expose generation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from shapegrammar.api.dependencies import get_engine_manager
from shapegrammar.api.engine_manager import EngineManager
from shapegrammar.api.schemas import GrammarConfigResponse

router = APIRouter()


@router.get("/config", response_model=GrammarConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> GrammarConfigResponse:
    cfg = manager.config
    return GrammarConfigResponse(
        grammar=cfg.grammar,
        seed=cfg.seed,
        eager_expansion=cfg.eager_expansion,
        build_on_start=cfg.build_on_start,
        regenerate_delay=cfg.regenerate_delay,
        tick_rate=manager.tick_rate,
        max_ticks=cfg.max_ticks,
        use_heightmap=cfg.use_heightmap,
        map_width=cfg.map_width,
        map_height=cfg.map_height,
    )
