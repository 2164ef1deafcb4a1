"""Monetary cost of dispatched trucks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ...config import settings


@dataclass(frozen=True, slots=True)
class CostModel:
    cost_per_km: float = field(default_factory=lambda: settings.cost_per_km)
    cost_per_truck_fixed: float = field(default_factory=lambda: settings.cost_per_truck_fixed)

    def __post_init__(self) -> None:
        if self.cost_per_km < 0 or self.cost_per_truck_fixed < 0:
            raise ValueError("Cost rates must be >= 0")

    def truck_cost(self, distance: float) -> float:
        return distance * self.cost_per_km + self.cost_per_truck_fixed

    def total_cost(self, distances: Iterable[float]) -> float:
        """Sum of per-truck costs, one truck per distance."""
        return sum(self.truck_cost(distance) for distance in distances)
