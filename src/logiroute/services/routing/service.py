"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import settings
from ...data.network_repository import NetworkStore, get_network_store
from ...models.domain import CustomerStop, LineItem, Order, RoadNetwork
from ...persistence.filesystem import FileStorage
from ...schemas.advisor import RoutePredictionInput
from ...schemas.network import MaxFlowResponse, ShortestPathResponse
from ...schemas.routing import (
    CapacityDiagnosticModel,
    CompareRequest,
    CompareResponse,
    CustomerStopModel,
    DeliveryEstimateModel,
    OrderModel,
    StrategyPlanModel,
    TourRequest,
    TourResponse,
    TruckRouteModel,
    UnreachableStopModel,
)
from ..advisor import AdvisorClient, estimate_delivery_time
from ..outputs.plan_formatter import comparison_to_csv, comparison_to_json
from .cost import CostModel
from .max_flow import max_flow
from .models import PathFound, PlanComparison, StrategyPlan, UnreachableStop
from .shortest_path import shortest_path
from .strategies import StrategyComposer
from .tour import build_tour

logger = logging.getLogger(__name__)


def orders_from_models(models: Sequence[OrderModel]) -> list[Order]:
    return [
        Order(
            order_id=model.id,
            address=model.address,
            items=tuple(
                LineItem(item_id=item.id, name=item.name, warehouse_id=item.warehouse_id) for item in model.items
            ),
            time_window=model.time_window,
        )
        for model in models
    ]


def _stops_from_models(models: Sequence[CustomerStopModel]) -> list[CustomerStop]:
    return [CustomerStop(address=model.address, time_window=model.time_window) for model in models]


def _coordinates(network: RoadNetwork, path: Sequence[str]) -> list[list[float]]:
    return [[network.node(node_id).x, network.node(node_id).y] for node_id in path]


def _unreachable_models(stops: Sequence[UnreachableStop]) -> list[UnreachableStopModel]:
    return [UnreachableStopModel(node_id=stop.node_id, role=stop.role, phase=stop.phase) for stop in stops]


def _build_cost_model(payload: CompareRequest) -> CostModel:
    overrides = payload.cost
    return CostModel(
        cost_per_km=overrides.cost_per_km
        if overrides and overrides.cost_per_km is not None
        else settings.cost_per_km,
        cost_per_truck_fixed=overrides.cost_per_truck_fixed
        if overrides and overrides.cost_per_truck_fixed is not None
        else settings.cost_per_truck_fixed,
    )


def find_shortest_path(start: str, end: str, store: NetworkStore | None = None) -> ShortestPathResponse:
    network = (store or get_network_store()).snapshot()
    result = shortest_path(network, start, end)
    if isinstance(result, PathFound):
        return ShortestPathResponse(start=start, end=end, found=True, path=list(result.path), distance=result.distance)
    return ShortestPathResponse(start=start, end=end, found=False)


def analyze_capacity(source: str, sink: str, store: NetworkStore | None = None) -> MaxFlowResponse:
    network = (store or get_network_store()).snapshot()
    return MaxFlowResponse(source=source, sink=sink, max_flow=max_flow(network, source, sink))


def plan_tour(payload: TourRequest, store: NetworkStore | None = None) -> TourResponse:
    """Single-truck tour from the depot through the given warehouses to the given customers."""
    network = (store or get_network_store()).snapshot()
    depot_id = payload.depot_id or settings.depot_id
    tour = build_tour(network, depot_id, payload.warehouse_ids, _stops_from_models(payload.customers))
    return TourResponse(
        depot_id=depot_id,
        path=list(tour.path),
        distance=tour.distance,
        stops=list(tour.stops),
        unreachable=_unreachable_models(tour.unreachable),
        coordinates=_coordinates(network, tour.path),
    )


def _plan_to_model(network: RoadNetwork, plan: StrategyPlan, traffic_score: float) -> StrategyPlanModel:
    trucks = []
    for truck in plan.trucks:
        estimate = estimate_delivery_time(truck.distance, len(truck.stops), traffic_score)
        trucks.append(
            TruckRouteModel(
                truck_id=truck.truck_id,
                origin=truck.origin,
                path=list(truck.path),
                distance=truck.distance,
                cost=truck.cost,
                item_count=truck.item_count,
                order_ids=list(truck.order_ids),
                stops=list(truck.stops),
                coordinates=_coordinates(network, truck.path),
                estimate=DeliveryEstimateModel(
                    simple_hours=estimate.simple_hours,
                    predicted_hours=estimate.predicted_hours,
                ),
            )
        )
    return StrategyPlanModel(
        strategy=plan.strategy,
        truck_count=plan.truck_count,
        total_distance=plan.total_distance,
        total_cost=plan.total_cost,
        trucks=trucks,
        unreachable=_unreachable_models(plan.unreachable),
        batch_sizes=plan.batch_sizes,
    )


def _apply_advisor_predictions(
    strategies: Sequence[StrategyPlanModel],
    traffic_score: float,
    advisor: AdvisorClient,
) -> int:
    """Replace local estimates with advisor predictions where the advisor returned one."""
    trucks = {f"{plan.strategy}/{truck.truck_id}": truck for plan in strategies for truck in plan.trucks}
    predictions = advisor.predict_delivery_times(
        [
            RoutePredictionInput(
                strategy_id=key,
                distance=truck.distance,
                stops=len(truck.stops),
                traffic_score=traffic_score,
            )
            for key, truck in trucks.items()
        ]
    )
    applied = 0
    for prediction in predictions:
        truck = trucks.get(prediction.strategy_id)
        if truck is None:
            logger.debug(f"Ignoring advisor prediction for unknown route '{prediction.strategy_id}'")
            continue
        truck.estimate = DeliveryEstimateModel(
            simple_hours=prediction.simple_time,
            predicted_hours=prediction.predicted_time,
            source="advisor",
        )
        applied += 1
    return applied


def _status(comparison: PlanComparison) -> str:
    if comparison.active_order_count == 0:
        return "empty"
    if comparison.has_unreachable:
        return "partial"
    return "complete"


def _normalize_tags(tags: Sequence[str]) -> list[str]:
    merged: list[str] = []
    for tag in tags:
        normalized = tag.strip()
        if normalized and normalized not in merged:
            merged.append(normalized)
    return merged


def compare_strategies(
    payload: CompareRequest,
    store: NetworkStore | None = None,
    advisor: AdvisorClient | None = None,
) -> CompareResponse:
    """Run all delivery strategies for one order snapshot against one network snapshot."""
    network, version = (store or get_network_store()).versioned_snapshot()
    orders = orders_from_models(payload.orders)
    cost_model = _build_cost_model(payload)
    depot_id = payload.depot_id or settings.depot_id

    composer = StrategyComposer(
        network,
        depot_id=depot_id,
        truck_capacity=payload.truck_capacity,
        cost_model=cost_model,
    )
    comparison = composer.compose(orders, primary_order_id=payload.primary_order_id)

    strategies = [_plan_to_model(network, plan, payload.traffic_score) for plan in comparison.plans()]

    advisor = advisor or AdvisorClient()
    predictions_applied = 0
    if payload.include_predictions and advisor.enabled and comparison.active_order_count:
        predictions_applied = _apply_advisor_predictions(strategies, payload.traffic_score, advisor)

    metadata: dict = {
        "status": _status(comparison),
        "active_order_count": comparison.active_order_count,
        "network_version": version,
        "depot_id": depot_id,
        "truck_capacity": composer.truck_capacity,
        "cost_per_km": cost_model.cost_per_km,
        "cost_per_truck_fixed": cost_model.cost_per_truck_fixed,
        "traffic_score": payload.traffic_score,
        "estimate_source": "advisor" if predictions_applied else "local",
    }
    if payload.run_label:
        metadata["run_label"] = payload.run_label
    if payload.requested_by:
        metadata["author"] = payload.requested_by
    if payload.notes:
        metadata["notes"] = payload.notes
    if payload.tags:
        metadata["tags"] = _normalize_tags(payload.tags)

    capacity = comparison.capacity
    cheapest = comparison.cheapest()
    response = CompareResponse(
        metadata=metadata,
        strategies=strategies,
        capacity=CapacityDiagnosticModel(
            order_id=capacity.order_id,
            warehouse_id=capacity.warehouse_id,
            destination=capacity.destination,
            distance=capacity.distance,
            max_flow=capacity.max_flow,
        )
        if capacity
        else None,
        cheapest_strategy=cheapest.strategy if cheapest else None,
    )

    if payload.persist:
        try:
            storage = FileStorage()
            run_dir = storage.save_run(
                comparison_to_json(response),
                comparison_to_csv(response),
                prefix="compare",
                label=payload.run_label,
            )
            response.metadata["output_dir"] = str(run_dir)
        except OSError as exc:
            logger.warning(f"Failed to persist comparison outputs: {exc}")

    return response
