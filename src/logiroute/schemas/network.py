"""Road network request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class NodeModel(BaseModel):
    id: str
    name: str
    x: float
    y: float


class EdgeModel(BaseModel):
    source: str
    target: str
    weight: float = Field(..., ge=0)
    capacity: int = Field(..., ge=1, description="Packages per hour.")


class NetworkModel(BaseModel):
    nodes: List[NodeModel]
    edges: List[EdgeModel]


class NetworkSnapshotResponse(NetworkModel):
    version: int


class TrafficRequest(BaseModel):
    seed: Optional[int] = Field(default=None, description="Seed for reproducible congestion factors.")


class ShortestPathResponse(BaseModel):
    start: str
    end: str
    found: bool
    path: List[str] = Field(default_factory=list)
    distance: Optional[float] = None


class MaxFlowResponse(BaseModel):
    source: str
    sink: str
    max_flow: int
