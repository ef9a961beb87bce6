"""Pydantic response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class NodeSchema(BaseModel):
    id: int
    name: str
    kind: str
    parent_id: int | None = None
    position: tuple[float, float, float]
    rotation: tuple[float, float, float, float]
    world_position: tuple[float, float, float]
    template_id: str | None = None
    shape_type: str | None = None
    state: str | None = None
    generated_count: int = 0


class TreeStateResponse(BaseModel):
    tick: int
    seed: int
    root_id: int
    symbol_count: int
    terminal_count: int
    pending_expansions: int
    nodes: list[NodeSchema] = Field(default_factory=list)


class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    node_ids: list[int] = Field(default_factory=list)


class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


class GrammarConfigResponse(BaseModel):
    grammar: str
    seed: int
    eager_expansion: bool
    build_on_start: bool
    regenerate_delay: float
    tick_rate: float
    max_ticks: int | None = None
    use_heightmap: bool
    map_width: int
    map_height: int
