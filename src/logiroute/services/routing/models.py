"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

StrategyName = Literal["direct", "consolidated", "batched"]


@dataclass(frozen=True, slots=True)
class PathFound:
    path: tuple[str, ...]
    distance: float

    found: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class NoPathFound:
    start: str
    end: str

    found: bool = field(default=False, init=False)
    distance: float = field(default=float("inf"), init=False)


ShortestPathResult = Union[PathFound, NoPathFound]


@dataclass(frozen=True, slots=True)
class UnreachableStop:
    """A required stop that could not be worked into a route."""

    node_id: str
    role: Literal["warehouse", "customer"]
    phase: str


@dataclass(slots=True)
class Tour:
    path: tuple[str, ...]
    distance: float
    stops: tuple[str, ...] = ()
    unreachable: tuple[UnreachableStop, ...] = ()

    @property
    def start(self) -> str:
        return self.path[0]


@dataclass(slots=True)
class TruckRoute:
    truck_id: str
    origin: str
    path: tuple[str, ...]
    distance: float
    cost: float
    item_count: int
    order_ids: tuple[str, ...]
    stops: tuple[str, ...] = ()


@dataclass(slots=True)
class StrategyPlan:
    strategy: StrategyName
    trucks: List[TruckRoute]
    total_distance: float
    total_cost: float
    unreachable: List[UnreachableStop] = field(default_factory=list)
    batch_sizes: dict[str, list[int]] = field(default_factory=dict)

    @property
    def truck_count(self) -> int:
        return len(self.trucks)


@dataclass(slots=True)
class CapacityDiagnostic:
    order_id: str
    warehouse_id: str
    destination: str
    distance: float
    max_flow: int


@dataclass(slots=True)
class PlanComparison:
    direct: StrategyPlan
    consolidated: StrategyPlan
    batched: StrategyPlan
    capacity: Optional[CapacityDiagnostic]
    active_order_count: int

    def plans(self) -> list[StrategyPlan]:
        return [self.direct, self.consolidated, self.batched]

    def cheapest(self) -> Optional[StrategyPlan]:
        """Lowest total cost among strategies that dispatched at least one truck."""
        candidates = [plan for plan in self.plans() if plan.trucks]
        if not candidates:
            return None
        return min(candidates, key=lambda plan: plan.total_cost)

    @property
    def has_unreachable(self) -> bool:
        return any(plan.unreachable for plan in self.plans())
