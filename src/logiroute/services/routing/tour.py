"""Nearest-neighbour tour construction with pickup, time-window and return phases.

This is a greedy heuristic, not an exact TSP solver. Each phase repeatedly
moves to the closest pending stop (first candidate wins ties) and splices the
full shortest path into the walk, so the returned path is traversable edge by
edge and may pass through nodes that are not stops.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ...models.domain import CustomerStop, RoadNetwork
from .models import PathFound, Tour, UnreachableStop
from .shortest_path import PathTable

logger = logging.getLogger(__name__)

_WINDOW_RANK = {"morning": 0, "afternoon": 1, "any": 2}


def _merge_customers(customers: Sequence[CustomerStop]) -> list[CustomerStop]:
    """One stop per address; a shared address keeps its most urgent window."""
    merged: dict[str, CustomerStop] = {}
    for stop in customers:
        existing = merged.get(stop.address)
        if existing is None or _WINDOW_RANK[stop.time_window] < _WINDOW_RANK[existing.time_window]:
            merged[stop.address] = stop
    return list(merged.values())


class _Walk:
    def __init__(self, start: str, table: PathTable) -> None:
        self.table = table
        self.current = start
        self.path: list[str] = [start]
        self.stops: list[str] = []
        self.distance = 0.0
        self.unreachable: list[UnreachableStop] = []

    def move_to(self, target: str) -> bool:
        entry = self.table.lookup(self.current, target)
        if not isinstance(entry, PathFound):
            return False
        self.path.extend(entry.path[1:])
        self.distance += entry.distance
        self.current = target
        return True

    def visit_nearest(self, pending: list[str], role: str, phase: str) -> None:
        remaining = list(pending)
        while remaining:
            nearest = None
            best = float("inf")
            for candidate in remaining:
                distance = self.table.distance(self.current, candidate)
                if distance < best:
                    best = distance
                    nearest = candidate
            if nearest is None:
                for node_id in remaining:
                    logger.warning(f"Skipping unreachable {role} '{node_id}' during {phase} phase")
                    self.unreachable.append(UnreachableStop(node_id=node_id, role=role, phase=phase))
                return
            self.move_to(nearest)
            self.stops.append(nearest)
            remaining.remove(nearest)


def build_tour(
    network: RoadNetwork,
    depot_id: str,
    warehouse_ids: Iterable[str],
    customers: Sequence[CustomerStop],
) -> Tour:
    """Build one closed walk: depot -> warehouses -> customers -> depot.

    Morning customers are served before everyone else; afternoon and any-time
    customers share a single pool. Stops that cannot be reached are skipped
    and reported in ``Tour.unreachable``.
    """
    warehouses = list(dict.fromkeys(warehouse_ids))
    stops = _merge_customers(customers)

    network.require(depot_id, role="depot")
    network.require(warehouses, role="warehouse")
    network.require([stop.address for stop in stops], role="customer address")

    if not warehouses and not stops:
        return Tour(path=(depot_id, depot_id), distance=0.0)

    table = PathTable(network, [depot_id, *warehouses, *(stop.address for stop in stops)])
    walk = _Walk(depot_id, table)

    walk.visit_nearest(warehouses, role="warehouse", phase="pickup")

    morning = [stop.address for stop in stops if stop.time_window == "morning"]
    later = [stop.address for stop in stops if stop.time_window != "morning"]
    walk.visit_nearest(morning, role="customer", phase="morning delivery")
    walk.visit_nearest(later, role="customer", phase="delivery")

    # Every visited stop was reached from the depot, so the way back exists.
    walk.move_to(depot_id)
    if len(walk.path) == 1:
        walk.path.append(depot_id)

    return Tour(
        path=tuple(walk.path),
        distance=walk.distance,
        stops=tuple(walk.stops),
        unreachable=tuple(walk.unreachable),
    )
