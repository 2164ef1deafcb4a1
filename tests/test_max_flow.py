import itertools
import random

import networkx as nx
import pytest

from logiroute.models.domain import Edge, Node, RoadNetwork, UnknownNodeError
from logiroute.services.routing.max_flow import max_flow


def _network(node_ids, edges) -> RoadNetwork:
    return RoadNetwork.from_parts(
        [Node(id=node_id, name=node_id, x=0.0, y=0.0) for node_id in node_ids],
        [Edge(source=a, target=b, weight=1.0, capacity=c) for a, b, c in edges],
    )


def test_single_edge_carries_its_capacity():
    network = _network(["D", "S"], [("D", "S", 8)])

    assert max_flow(network, "D", "S") == 8
    assert max_flow(network, "S", "D") == 8


def test_flow_uses_parallel_routes():
    network = _network(
        "SABT",
        [("S", "A", 10), ("S", "B", 5), ("A", "B", 15), ("A", "T", 5), ("B", "T", 10)],
    )

    assert max_flow(network, "S", "T") == 15


def test_bottleneck_limits_flow():
    network = _network("SMT", [("S", "M", 20), ("M", "T", 3)])

    assert max_flow(network, "S", "T") == 3


def test_same_source_and_sink_is_zero():
    network = _network("AB", [("A", "B", 4)])

    assert max_flow(network, "A", "A") == 0


def test_disconnected_sink_is_zero():
    network = _network("ABCD", [("A", "B", 4), ("C", "D", 9)])

    assert max_flow(network, "A", "D") == 0


def test_unknown_sink_is_rejected():
    network = _network("AB", [("A", "B", 4)])

    with pytest.raises(UnknownNodeError):
        max_flow(network, "A", "nowhere")


@pytest.mark.parametrize("seed", range(6))
def test_matches_networkx_and_is_symmetric(seed: int):
    rng = random.Random(seed)
    node_ids = [f"n{i}" for i in range(9)]
    edges = [
        (a, b, rng.randint(1, 15))
        for a, b in itertools.combinations(node_ids, 2)
        if rng.random() < 0.35
    ]
    network = _network(node_ids, edges)
    graph = nx.Graph()
    graph.add_nodes_from(node_ids)
    for a, b, capacity in edges:
        graph.add_edge(a, b, capacity=capacity)

    source, sink = node_ids[0], node_ids[-1]
    expected = nx.maximum_flow_value(graph, source, sink)

    assert max_flow(network, source, sink) == expected
    assert max_flow(network, sink, source) == expected
