import itertools
import math
import random

import networkx as nx
import pytest

from logiroute.models.domain import Edge, Node, RoadNetwork, UnknownNodeError
from logiroute.services.routing.models import NoPathFound, PathFound
from logiroute.services.routing.shortest_path import PathTable, shortest_path


def _network(node_ids, edges) -> RoadNetwork:
    return RoadNetwork.from_parts(
        [Node(id=node_id, name=node_id, x=0.0, y=0.0) for node_id in node_ids],
        [Edge(source=a, target=b, weight=w, capacity=c) for a, b, w, c in edges],
    )


def _random_network(seed: int, size: int = 12, density: float = 0.3) -> RoadNetwork:
    rng = random.Random(seed)
    node_ids = [f"n{i}" for i in range(size)]
    edges = [
        (a, b, float(rng.randint(1, 20)), rng.randint(1, 10))
        for a, b in itertools.combinations(node_ids, 2)
        if rng.random() < density
    ]
    return _network(node_ids, edges)


def _to_networkx(network: RoadNetwork) -> nx.Graph:
    graph = nx.Graph()
    graph.add_nodes_from(network.node_ids())
    for edge in network.edges:
        graph.add_edge(edge.source, edge.target, weight=edge.weight, capacity=edge.capacity)
    return graph


def test_shortest_path_prefers_lighter_detour():
    network = _network("ABC", [("A", "B", 1, 1), ("B", "C", 1, 1), ("A", "C", 5, 1)])

    result = shortest_path(network, "A", "C")

    assert isinstance(result, PathFound)
    assert result.path == ("A", "B", "C")
    assert result.distance == 2


def test_shortest_path_to_itself_is_zero():
    network = _network("AB", [("A", "B", 3, 1)])

    result = shortest_path(network, "A", "A")

    assert result.found
    assert result.path == ("A",)
    assert result.distance == 0


def test_disconnected_pair_is_not_found():
    network = _network("ABCD", [("A", "B", 1, 1), ("C", "D", 1, 1)])

    result = shortest_path(network, "A", "D")

    assert isinstance(result, NoPathFound)
    assert not result.found
    assert math.isinf(result.distance)


def test_unknown_node_is_rejected():
    network = _network("AB", [("A", "B", 1, 1)])

    with pytest.raises(UnknownNodeError) as excinfo:
        shortest_path(network, "A", "Z")

    assert excinfo.value.node_id == "Z"


def test_equal_cost_routes_resolve_deterministically():
    network = _network("ABCD", [("A", "B", 1, 1), ("A", "C", 1, 1), ("B", "D", 1, 1), ("C", "D", 1, 1)])

    first = shortest_path(network, "A", "D")
    second = shortest_path(network, "A", "D")

    assert first == second
    assert first.path == ("A", "B", "D")


@pytest.mark.parametrize("seed", range(8))
def test_distances_match_networkx(seed: int):
    network = _random_network(seed)
    graph = _to_networkx(network)

    for start, end in itertools.combinations(network.node_ids(), 2):
        result = shortest_path(network, start, end)
        if nx.has_path(graph, start, end):
            assert result.found
            assert result.distance == pytest.approx(nx.dijkstra_path_length(graph, start, end))
            assert result.path[0] == start and result.path[-1] == end
        else:
            assert not result.found


@pytest.mark.parametrize("seed", range(4))
def test_distance_is_symmetric(seed: int):
    network = _random_network(seed, density=0.25)

    for start, end in itertools.combinations(network.node_ids(), 2):
        forward = shortest_path(network, start, end)
        backward = shortest_path(network, end, start)
        assert forward.found == backward.found
        if forward.found:
            assert forward.distance == pytest.approx(backward.distance)


def test_path_table_reuses_forward_search_for_reverse_entries():
    network = _network("ABCX", [("A", "B", 2, 1), ("B", "C", 3, 1)])

    table = PathTable(network, ["A", "C", "A", "X"])

    assert len(table) == 3
    assert table.lookup("C", "A").path == ("C", "B", "A")
    assert table.distance("A", "C") == 5
    assert table.distance("A", "A") == 0
    assert not table.lookup("X", "A").found
