import csv
import json
from pathlib import Path

import pytest

from logiroute.data.network_repository import NetworkStore
from logiroute.models.domain import Edge, Node, RoadNetwork, UnknownNodeError
from logiroute.persistence.filesystem import FileStorage
from logiroute.schemas.advisor import DeliveryPrediction, RebalanceRequest
from logiroute.schemas.routing import (
    CompareRequest,
    CostOverrides,
    CustomerStopModel,
    LineItemModel,
    OrderModel,
    TourRequest,
)
from logiroute.services.advisor.service import rebalance_stock
from logiroute.services.routing import service as routing_service


def _store() -> NetworkStore:
    nodes = [
        Node(id="depot", name="Depot", x=0, y=0),
        Node(id="wh-1", name="Warehouse 1", x=10, y=0),
        Node(id="c1", name="Customer 1", x=15, y=0),
        Node(id="island", name="Island", x=99, y=99),
    ]
    edges = [
        Edge(source="depot", target="wh-1", weight=10, capacity=4),
        Edge(source="wh-1", target="c1", weight=5, capacity=6),
    ]
    return NetworkStore(RoadNetwork.from_parts(nodes, edges))


def _order(order_id: str, address: str, items: int = 1, time_window: str = "any") -> OrderModel:
    return OrderModel(
        id=order_id,
        address=address,
        time_window=time_window,
        items=[LineItemModel(id=f"{order_id}-{i}", name="Widget", warehouse_id="wh-1") for i in range(items)],
    )


class DisabledAdvisor:
    enabled = False


class PredictingAdvisor:
    enabled = True

    def __init__(self) -> None:
        self.requests = []

    def predict_delivery_times(self, routes):
        self.requests.extend(routes)
        return [
            DeliveryPrediction(strategy_id="consolidated/consolidated-1", predicted_time=9.5, simple_time=8.0),
            DeliveryPrediction(strategy_id="unknown/route", predicted_time=1.0, simple_time=1.0),
        ]


def _compare(payload: CompareRequest, advisor=None):
    return routing_service.compare_strategies(payload, store=_store(), advisor=advisor or DisabledAdvisor())


def test_compare_reports_all_strategies_with_metadata():
    payload = CompareRequest(
        orders=[_order("o1", "c1", items=3)],
        depot_id="depot",
        truck_capacity=2,
        cost=CostOverrides(cost_per_km=2.0, cost_per_truck_fixed=10.0),
        run_label="Morning run",
        requested_by="dispatcher",
        tags=[" east ", "east", "priority"],
    )

    response = _compare(payload)

    assert [plan.strategy for plan in response.strategies] == ["direct", "consolidated", "batched"]
    batched = response.strategies[2]
    assert batched.truck_count == 2
    assert batched.batch_sizes == {"wh-1": [2, 1]}
    assert response.metadata["status"] == "complete"
    assert response.metadata["network_version"] == 1
    assert response.metadata["author"] == "dispatcher"
    assert response.metadata["tags"] == ["east", "priority"]
    assert response.metadata["estimate_source"] == "local"
    assert response.cheapest_strategy == "direct"
    assert response.capacity.warehouse_id == "wh-1"
    assert response.capacity.max_flow == 6

    direct_truck = response.strategies[0].trucks[0]
    assert direct_truck.cost == pytest.approx(5 * 2.0 + 10.0)
    assert direct_truck.coordinates == [[10, 0], [15, 0]]
    assert direct_truck.estimate.source == "local"


def test_compare_without_active_orders_is_empty():
    response = _compare(CompareRequest(orders=[OrderModel(id="o1", address="c1")], depot_id="depot"))

    assert response.metadata["status"] == "empty"
    assert response.capacity is None
    assert response.cheapest_strategy is None
    assert all(plan.truck_count == 0 for plan in response.strategies)


def test_compare_flags_unreachable_customers_as_partial():
    response = _compare(CompareRequest(orders=[_order("o1", "c1"), _order("o2", "island")], depot_id="depot"))

    assert response.metadata["status"] == "partial"
    direct = response.strategies[0]
    assert [stop.node_id for stop in direct.unreachable] == ["island"]


def test_compare_rejects_unknown_addresses():
    with pytest.raises(UnknownNodeError):
        _compare(CompareRequest(orders=[_order("o1", "atlantis")], depot_id="depot"))


def test_advisor_predictions_override_local_estimates():
    advisor = PredictingAdvisor()

    response = _compare(CompareRequest(orders=[_order("o1", "c1")], depot_id="depot", traffic_score=20), advisor)

    consolidated = response.strategies[1].trucks[0]
    assert consolidated.estimate.source == "advisor"
    assert consolidated.estimate.predicted_hours == 9.5
    assert response.strategies[0].trucks[0].estimate.source == "local"
    assert response.metadata["estimate_source"] == "advisor"
    assert {route.traffic_score for route in advisor.requests} == {20}


def test_predictions_can_be_switched_off():
    advisor = PredictingAdvisor()

    _compare(CompareRequest(orders=[_order("o1", "c1")], depot_id="depot", include_predictions=False), advisor)

    assert advisor.requests == []


def test_compare_persists_outputs(monkeypatch, tmp_path: Path):
    real_storage = routing_service.FileStorage
    monkeypatch.setattr(routing_service, "FileStorage", lambda: real_storage(root=tmp_path))

    response = _compare(
        CompareRequest(orders=[_order("o1", "c1", items=2)], depot_id="depot", persist=True, run_label="Week 12")
    )

    run_dir = Path(response.metadata["output_dir"])
    assert run_dir.parent == tmp_path / "outputs"
    assert run_dir.name.startswith("compare_week-12_")
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["cheapest_strategy"] == response.cheapest_strategy
    with (run_dir / "trucks.csv").open(encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert {row["strategy"] for row in rows} == {"direct", "consolidated", "batched"}


def test_persistence_failure_does_not_fail_the_run(monkeypatch):
    class BrokenStorage:
        def save_run(self, *args, **kwargs):
            raise OSError("disk full")

    monkeypatch.setattr(routing_service, "FileStorage", BrokenStorage)

    response = _compare(CompareRequest(orders=[_order("o1", "c1")], depot_id="depot", persist=True))

    assert "output_dir" not in response.metadata
    assert response.metadata["status"] == "complete"


def test_plan_tour_adds_coordinates():
    response = routing_service.plan_tour(
        TourRequest(depot_id="depot", warehouse_ids=["wh-1"], customers=[CustomerStopModel(address="c1")]),
        store=_store(),
    )

    assert response.path == ["depot", "wh-1", "c1", "wh-1", "depot"]
    assert response.distance == 30
    assert response.coordinates[2] == [15, 0]


def test_shortest_path_and_max_flow_tools():
    store = _store()

    found = routing_service.find_shortest_path("depot", "c1", store=store)
    missing = routing_service.find_shortest_path("depot", "island", store=store)

    assert found.found and found.path == ["depot", "wh-1", "c1"] and found.distance == 15
    assert not missing.found and missing.path == [] and missing.distance is None
    assert routing_service.analyze_capacity("depot", "c1", store=store).max_flow == 4


def test_rebalance_reports_unavailable_advisor():
    response = rebalance_stock(RebalanceRequest(orders=[_order("o1", "c1")]), store=_store(), advisor=DisabledAdvisor())

    assert response.available is False
    assert response.suggestions == []
