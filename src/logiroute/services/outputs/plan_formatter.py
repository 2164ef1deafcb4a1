"""Serializers for strategy comparison outputs."""

from __future__ import annotations

import csv
import io

from ...schemas.routing import CompareResponse


def comparison_to_json(response: CompareResponse) -> dict:
    return {
        "metadata": response.metadata,
        "cheapest_strategy": response.cheapest_strategy,
        "capacity": response.capacity.model_dump() if response.capacity else None,
        "strategies": [
            {
                "strategy": plan.strategy,
                "truck_count": plan.truck_count,
                "total_distance": plan.total_distance,
                "total_cost": plan.total_cost,
                "batch_sizes": plan.batch_sizes,
                "unreachable": [stop.model_dump() for stop in plan.unreachable],
                "trucks": [
                    truck.model_dump(exclude={"coordinates"})
                    for truck in plan.trucks
                ],
            }
            for plan in response.strategies
        ],
    }


def comparison_to_csv(response: CompareResponse) -> str:
    """One row per dispatched truck across all strategies."""
    buffer = io.StringIO()
    fieldnames = [
        "strategy",
        "truck_id",
        "origin",
        "item_count",
        "order_ids",
        "stops",
        "path",
        "distance",
        "cost",
        "simple_hours",
        "predicted_hours",
        "estimate_source",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator="\n")
    writer.writeheader()
    for plan in response.strategies:
        for truck in plan.trucks:
            estimate = truck.estimate
            writer.writerow(
                {
                    "strategy": plan.strategy,
                    "truck_id": truck.truck_id,
                    "origin": truck.origin,
                    "item_count": truck.item_count,
                    "order_ids": ";".join(truck.order_ids),
                    "stops": ";".join(truck.stops),
                    "path": ">".join(truck.path),
                    "distance": truck.distance,
                    "cost": truck.cost,
                    "simple_hours": estimate.simple_hours if estimate else "",
                    "predicted_hours": estimate.predicted_hours if estimate else "",
                    "estimate_source": estimate.source if estimate else "",
                }
            )
    return buffer.getvalue()
