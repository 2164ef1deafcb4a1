"""Road network endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from ...data.network_repository import get_network_store, network_from_payload, network_to_payload
from ...schemas.network import (
    MaxFlowResponse,
    NetworkModel,
    NetworkSnapshotResponse,
    ShortestPathResponse,
    TrafficRequest,
)
from ...services.routing.service import analyze_capacity, find_shortest_path

router = APIRouter(prefix="/network", tags=["network"])


def _snapshot_response() -> NetworkSnapshotResponse:
    network, version = get_network_store().versioned_snapshot()
    return NetworkSnapshotResponse(version=version, **network_to_payload(network))


@router.get("", response_model=NetworkSnapshotResponse, status_code=status.HTTP_200_OK)
def get_network() -> NetworkSnapshotResponse:
    return _snapshot_response()


@router.put("", response_model=NetworkSnapshotResponse, status_code=status.HTTP_200_OK)
def replace_network(payload: NetworkModel) -> NetworkSnapshotResponse:
    """Replace the current snapshot; the new network also becomes the traffic baseline."""
    try:
        network = network_from_payload(payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    get_network_store().replace(network, as_base=True)
    return _snapshot_response()


@router.post("/traffic", response_model=NetworkSnapshotResponse, status_code=status.HTTP_200_OK)
def simulate_traffic(payload: TrafficRequest | None = None) -> NetworkSnapshotResponse:
    seed = payload.seed if payload else None
    try:
        get_network_store().apply_traffic(seed=seed)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _snapshot_response()


@router.post("/reset", response_model=NetworkSnapshotResponse, status_code=status.HTTP_200_OK)
def reset_network() -> NetworkSnapshotResponse:
    get_network_store().reset()
    return _snapshot_response()


@router.get("/shortest-path", response_model=ShortestPathResponse, status_code=status.HTTP_200_OK)
def shortest_path(
    start: str = Query(..., description="Start node id"),
    end: str = Query(..., description="End node id"),
) -> ShortestPathResponse:
    try:
        return find_shortest_path(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/max-flow", response_model=MaxFlowResponse, status_code=status.HTTP_200_OK)
def max_flow(
    source: str = Query(..., description="Source node id"),
    sink: str = Query(..., description="Sink node id"),
) -> MaxFlowResponse:
    try:
        return analyze_capacity(source, sink)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
