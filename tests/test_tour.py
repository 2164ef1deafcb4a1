import pytest

from logiroute.data.network_repository import build_demo_network
from logiroute.models.domain import CustomerStop, Edge, Node, RoadNetwork, UnknownNodeError
from logiroute.services.routing.models import UnreachableStop
from logiroute.services.routing.tour import build_tour


def _network(node_ids, edges) -> RoadNetwork:
    return RoadNetwork.from_parts(
        [Node(id=node_id, name=node_id, x=0.0, y=0.0) for node_id in node_ids],
        [Edge(source=a, target=b, weight=w, capacity=5) for a, b, w in edges],
    )


def _assert_walkable(network: RoadNetwork, path, distance: float) -> None:
    weights = {edge.key: edge.weight for edge in network.edges}
    total = 0.0
    for a, b in zip(path, path[1:]):
        if a == b:
            continue
        total += weights[frozenset((a, b))]
    assert total == pytest.approx(distance)


def test_depot_warehouse_customer_chain():
    network = _network(["D", "W", "C"], [("D", "W", 10), ("W", "C", 5)])

    tour = build_tour(network, "D", ["W"], [CustomerStop("C")])

    assert tour.path == ("D", "W", "C", "W", "D")
    assert tour.distance == 30
    assert tour.stops == ("W", "C")
    assert tour.unreachable == ()


def test_nothing_to_visit_returns_depot_twice():
    network = _network(["D", "W"], [("D", "W", 10)])

    tour = build_tour(network, "D", [], [])

    assert tour.path == ("D", "D")
    assert tour.distance == 0


def test_morning_customer_served_before_closer_afternoon_customer():
    network = _network(["D", "M", "A"], [("D", "M", 10), ("D", "A", 1)])

    tour = build_tour(network, "D", [], [CustomerStop("A", "afternoon"), CustomerStop("M", "morning")])

    assert tour.stops == ("M", "A")
    assert tour.path == ("D", "M", "D", "A", "D")
    assert tour.distance == 22


def test_afternoon_and_any_share_one_pool():
    network = _network(["D", "A", "X"], [("D", "A", 5), ("D", "X", 1)])

    tour = build_tour(network, "D", [], [CustomerStop("A", "afternoon"), CustomerStop("X", "any")])

    assert tour.stops == ("X", "A")


def test_nearest_warehouse_is_picked_first():
    network = _network(["D", "W1", "W2"], [("D", "W1", 9), ("D", "W2", 2), ("W1", "W2", 8)])

    tour = build_tour(network, "D", ["W1", "W2"], [])

    assert tour.stops == ("W2", "W1")
    assert tour.distance == 2 + 8 + 9


def test_equal_distances_keep_input_order():
    network = _network(["D", "P", "Q"], [("D", "P", 4), ("D", "Q", 4)])

    tour = build_tour(network, "D", [], [CustomerStop("Q"), CustomerStop("P")])

    assert tour.stops[0] == "Q"


def test_unreachable_customer_is_skipped_and_reported():
    network = _network(["D", "C", "Z"], [("D", "C", 3)])

    tour = build_tour(network, "D", [], [CustomerStop("C"), CustomerStop("Z", "morning")])

    assert tour.path == ("D", "C", "D")
    assert tour.distance == 6
    assert tour.unreachable == (UnreachableStop(node_id="Z", role="customer", phase="morning delivery"),)


def test_shared_address_is_visited_once_with_most_urgent_window():
    network = _network(["D", "C", "N"], [("D", "C", 10), ("D", "N", 1)])

    tour = build_tour(
        network,
        "D",
        [],
        [CustomerStop("C", "any"), CustomerStop("N", "afternoon"), CustomerStop("C", "morning")],
    )

    assert tour.stops == ("C", "N")


def test_unknown_depot_is_rejected():
    network = _network(["D", "C"], [("D", "C", 3)])

    with pytest.raises(UnknownNodeError):
        build_tour(network, "nowhere", [], [CustomerStop("C")])


def test_unknown_customer_is_rejected():
    network = _network(["D", "C"], [("D", "C", 3)])

    with pytest.raises(UnknownNodeError):
        build_tour(network, "D", [], [CustomerStop("ghost")])


def test_demo_tour_is_a_closed_walk():
    network = build_demo_network(seed=1)

    tour = build_tour(
        network,
        "warehouse-a",
        ["warehouse-c", "warehouse-e"],
        [CustomerStop("loc18", "afternoon"), CustomerStop("loc1", "morning"), CustomerStop("loc11")],
    )

    assert tour.path[0] == "warehouse-a"
    assert tour.path[-1] == "warehouse-a"
    assert tour.unreachable == ()
    assert set(tour.stops) == {"warehouse-c", "warehouse-e", "loc18", "loc1", "loc11"}
    assert tour.stops.index("loc1") < tour.stops.index("loc18")
    _assert_walkable(network, tour.path, tour.distance)


def test_unreachable_warehouse_is_skipped_during_pickup():
    network = _network(["D", "W", "C", "Z"], [("D", "W", 10), ("W", "C", 5)])

    tour = build_tour(network, "D", ["Z", "W"], [CustomerStop("C")])

    assert tour.path == ("D", "W", "C", "W", "D")
    assert tour.distance == 30
    assert tour.unreachable == (UnreachableStop(node_id="Z", role="warehouse", phase="pickup"),)
