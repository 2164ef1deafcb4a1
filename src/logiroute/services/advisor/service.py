"""Advisor-backed recommendations built from the current order list and network snapshot."""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...data.network_repository import NetworkStore, get_network_store
from ...models.domain import RoadNetwork
from ...schemas.advisor import (
    AdvisorEdge,
    AdvisorNode,
    AdvisorOrder,
    AdvisorProduct,
    ForecastDemandRequest,
    ProposalRequest,
    ProposalResponse,
    ProposeRouteRequest,
    RebalanceRequest,
    RebalanceResponse,
    WarehouseInfo,
)
from ...schemas.routing import OrderModel
from .client import AdvisorClient


def _advisor_orders(orders: Sequence[OrderModel]) -> list[AdvisorOrder]:
    return [
        AdvisorOrder(
            order_id=order.id,
            customer_location_id=order.address,
            products=[
                AdvisorProduct(product_id=item.id, name=item.name, warehouse_id=item.warehouse_id)
                for item in order.items
            ],
            time_window=order.time_window,
        )
        for order in orders
        if order.items
    ]


def _advisor_nodes(network: RoadNetwork, warehouses_only: bool = False) -> list[AdvisorNode]:
    nodes = network.warehouses() if warehouses_only else network.nodes
    return [AdvisorNode(id=node.id, name=node.name, x=node.x, y=node.y) for node in nodes]


def rebalance_stock(
    payload: RebalanceRequest,
    store: NetworkStore | None = None,
    advisor: AdvisorClient | None = None,
) -> RebalanceResponse:
    advisor = advisor or AdvisorClient()
    if not advisor.enabled:
        return RebalanceResponse(available=False)

    network = (store or get_network_store()).snapshot()
    request = ForecastDemandRequest(
        orders=_advisor_orders(payload.orders),
        warehouses=[WarehouseInfo(warehouse_id=node.id, name=node.name) for node in network.warehouses()],
    )
    return RebalanceResponse(available=True, suggestions=advisor.forecast_demand(request))


def propose_routes(
    payload: ProposalRequest,
    store: NetworkStore | None = None,
    advisor: AdvisorClient | None = None,
) -> ProposalResponse:
    """Ask the advisor for an alternative truck plan with commentary."""
    advisor = advisor or AdvisorClient()
    if not advisor.enabled:
        return ProposalResponse(available=False)

    network = (store or get_network_store()).snapshot()
    request = ProposeRouteRequest(
        orders=_advisor_orders(payload.orders),
        warehouses=_advisor_nodes(network, warehouses_only=True),
        nodes=_advisor_nodes(network),
        edges=[AdvisorEdge(source=edge.source, target=edge.target, weight=edge.weight) for edge in network.edges],
        truck_capacity=payload.truck_capacity or settings.truck_capacity,
    )
    proposal = advisor.propose_route(request)
    return ProposalResponse(available=proposal is not None, proposal=proposal)
