"""GET /api/v1/state — the generated tree and the event feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from shapegrammar.api.dependencies import get_engine_manager
from shapegrammar.api.engine_manager import EngineManager
from shapegrammar.api.schemas import EventSchema, NodeSchema, TreeStateResponse

router = APIRouter()


@router.get("/state", response_model=TreeStateResponse)
def get_state(
    manager: EngineManager = Depends(get_engine_manager),
) -> TreeStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    return TreeStateResponse(
        tick=snapshot.tick,
        seed=snapshot.seed,
        root_id=snapshot.root_id,
        symbol_count=snapshot.symbol_count,
        terminal_count=snapshot.terminal_count,
        pending_expansions=snapshot.pending_expansions,
        nodes=[
            NodeSchema(
                id=n.node_id, name=n.name, kind=n.kind, parent_id=n.parent_id,
                position=n.position, rotation=n.rotation, world_position=n.world_position,
                template_id=n.template_id, shape_type=n.shape_type, state=n.state,
                generated_count=n.generated_count,
            )
            for n in snapshot.nodes
        ],
    )


@router.get("/events", response_model=list[EventSchema])
def get_events(
    since_tick: int | None = Query(None, ge=0, description="Only events at or after this tick"),
    limit: int = Query(50, ge=1, le=1000),
    manager: EngineManager = Depends(get_engine_manager),
) -> list[EventSchema]:
    log = manager.event_log
    events = log.since_tick(since_tick)[-limit:] if since_tick is not None else log.latest(limit)
    return [
        EventSchema(tick=e.tick, category=e.category, message=e.message, node_ids=list(e.node_ids))
        for e in events
    ]
