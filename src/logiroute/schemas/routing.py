"""Routing request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TimeWindowField = Literal["any", "morning", "afternoon"]


class LineItemModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    warehouse_id: str = Field(..., alias="warehouseId")


class OrderModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    address: str = Field(..., description="Destination node id.")
    items: List[LineItemModel] = Field(default_factory=list)
    time_window: TimeWindowField = Field(default="any", alias="timeWindow")


class CustomerStopModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: str
    time_window: TimeWindowField = Field(default="any", alias="timeWindow")


class UnreachableStopModel(BaseModel):
    node_id: str
    role: str
    phase: str


class TourRequest(BaseModel):
    depot_id: Optional[str] = Field(default=None, description="Defaults to the configured central depot.")
    warehouse_ids: List[str] = Field(default_factory=list)
    customers: List[CustomerStopModel] = Field(default_factory=list)


class TourResponse(BaseModel):
    depot_id: str
    path: List[str]
    distance: float
    stops: List[str]
    unreachable: List[UnreachableStopModel]
    coordinates: List[List[float]] = Field(default_factory=list)


class CostOverrides(BaseModel):
    cost_per_km: Optional[float] = Field(None, ge=0)
    cost_per_truck_fixed: Optional[float] = Field(None, ge=0)


class CompareRequest(BaseModel):
    orders: List[OrderModel] = Field(default_factory=list)
    primary_order_id: Optional[str] = Field(
        default=None,
        description="Order used for the capacity diagnostic. Defaults to the first active order.",
    )
    depot_id: Optional[str] = None
    truck_capacity: Optional[int] = Field(None, ge=1)
    cost: Optional[CostOverrides] = None
    traffic_score: float = Field(default=0.0, ge=0.0, le=100.0)
    include_predictions: bool = Field(
        default=True,
        description="Ask the advisor service for delivery-time predictions when it is configured.",
    )
    persist: bool = False
    requested_by: Optional[str] = Field(default=None, description="Person or system requesting the run.")
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")
    tags: Optional[List[str]] = Field(default=None, description="Tags to associate with the run.")
    notes: Optional[str] = Field(default=None, description="Free-form notes captured with the run.")


class DeliveryEstimateModel(BaseModel):
    simple_hours: float
    predicted_hours: float
    source: Literal["local", "advisor"] = "local"


class TruckRouteModel(BaseModel):
    truck_id: str
    origin: str
    path: List[str]
    distance: float
    cost: float
    item_count: int
    order_ids: List[str]
    stops: List[str]
    coordinates: List[List[float]] = Field(default_factory=list)
    estimate: Optional[DeliveryEstimateModel] = None


class StrategyPlanModel(BaseModel):
    strategy: str
    truck_count: int
    total_distance: float
    total_cost: float
    trucks: List[TruckRouteModel]
    unreachable: List[UnreachableStopModel] = Field(default_factory=list)
    batch_sizes: Dict[str, List[int]] = Field(default_factory=dict)


class CapacityDiagnosticModel(BaseModel):
    order_id: str
    warehouse_id: str
    destination: str
    distance: float
    max_flow: int


class CompareResponse(BaseModel):
    metadata: dict
    strategies: List[StrategyPlanModel]
    capacity: Optional[CapacityDiagnosticModel] = None
    cheapest_strategy: Optional[str] = None
