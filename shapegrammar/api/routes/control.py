"""POST /api/v1/regenerate and /api/v1/control/{action} — generation controls."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends, Query

from shapegrammar.api.dependencies import get_engine_manager
from shapegrammar.api.engine_manager import EngineManager
from shapegrammar.api.schemas import ControlResponse

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    stop = "stop"
    step = "step"
    reset = "reset"


def _current_tick(manager: EngineManager) -> int:
    snapshot = manager.get_snapshot()
    return snapshot.tick if snapshot else 0


@router.post("/regenerate", response_model=ControlResponse)
def regenerate(
    seed: int | None = Query(None, description="Reseed the root's random source first"),
    delay: float = Query(0.0, ge=0.0, le=60.0, description="Seconds between delete and expand"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    manager.regenerate(delay=delay, seed=seed)
    return ControlResponse(
        status="ok",
        message=f"Regeneration queued (seed={seed}, delay={delay:g}s).",
        tick=_current_tick(manager),
    )


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    tick = _current_tick(manager)

    match action:
        case ControlAction.start:
            if manager.running:
                return ControlResponse(status="noop", message="Already running.", tick=tick)
            manager.start()
            return ControlResponse(status="ok", message="Generation loop started.", tick=tick)

        case ControlAction.stop:
            if not manager.running:
                return ControlResponse(status="noop", message="Not running.", tick=tick)
            manager.stop()
            return ControlResponse(status="ok", message="Generation loop stopped.", tick=tick)

        case ControlAction.step:
            if manager.running:
                return ControlResponse(status="error", message="Stop the loop before stepping.", tick=tick)
            manager.step()
            return ControlResponse(status="ok", message="Single tick executed.", tick=_current_tick(manager))

        case ControlAction.reset:
            manager.reset()
            return ControlResponse(status="ok", message="Grammar reset.", tick=_current_tick(manager))


@router.post("/speed")
def set_speed(
    tps: float = Query(20.0, gt=0.5, le=100.0, description="Ticks per second"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    manager.tick_rate = 1.0 / tps
    return ControlResponse(status="ok", message=f"Speed set to {tps:.1f} tps.", tick=_current_tick(manager))
