"""Wire schemas for the text-generation advisor service.

Field names travel in camelCase to match the advisor's flow definitions.
"""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .routing import OrderModel


class AdvisorModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdvisorProduct(AdvisorModel):
    product_id: str
    name: str
    warehouse_id: str


class AdvisorOrder(AdvisorModel):
    order_id: str
    customer_location_id: str
    products: List[AdvisorProduct]
    time_window: Literal["any", "morning", "afternoon"] = "any"


class WarehouseInfo(AdvisorModel):
    warehouse_id: str
    name: str


class ForecastDemandRequest(AdvisorModel):
    orders: List[AdvisorOrder]
    warehouses: List[WarehouseInfo]


class StockRebalance(AdvisorModel):
    product_name: str
    from_warehouse_id: str
    to_warehouse_id: str
    reason: str


class RoutePredictionInput(AdvisorModel):
    strategy_id: str
    distance: float
    stops: int
    traffic_score: float = Field(default=0.0, ge=0.0, le=100.0)


class PredictDeliveryTimesRequest(AdvisorModel):
    routes: List[RoutePredictionInput]


class DeliveryPrediction(AdvisorModel):
    strategy_id: str
    predicted_time: float
    simple_time: float


class AdvisorNode(AdvisorModel):
    id: str
    name: str
    x: float
    y: float


class AdvisorEdge(AdvisorModel):
    source: str
    target: str
    weight: float


class ProposeRouteRequest(AdvisorModel):
    orders: List[AdvisorOrder]
    warehouses: List[AdvisorNode]
    nodes: List[AdvisorNode]
    edges: List[AdvisorEdge]
    truck_capacity: int


class ProposedTruckRoute(AdvisorModel):
    truck_id: str
    start_warehouse_id: str
    pickup_warehouse_ids: List[str] = Field(default_factory=list)
    delivery_customer_ids: List[str] = Field(default_factory=list)


class RouteProposal(AdvisorModel):
    commentary: str
    truck_routes: List[ProposedTruckRoute]


class RebalanceRequest(BaseModel):
    orders: List[OrderModel] = Field(default_factory=list)


class RebalanceResponse(BaseModel):
    available: bool
    suggestions: List[StockRebalance] = Field(default_factory=list)


class ProposalRequest(BaseModel):
    orders: List[OrderModel] = Field(default_factory=list)
    truck_capacity: int | None = Field(default=None, ge=1)


class ProposalResponse(BaseModel):
    available: bool
    proposal: RouteProposal | None = None
