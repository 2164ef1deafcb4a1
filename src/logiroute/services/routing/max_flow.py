"""Edmonds-Karp maximum flow over the capacity-labelled road network."""

from __future__ import annotations

from collections import deque

from ...models.domain import RoadNetwork


def _residual_graph(network: RoadNetwork) -> tuple[dict[str, dict[str, int]], dict[str, list[str]]]:
    # Both directions start at the full edge capacity; they are not coupled.
    residual: dict[str, dict[str, int]] = {node_id: {} for node_id in network.node_ids()}
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in network.node_ids()}
    for edge in network.edges:
        residual[edge.source][edge.target] = edge.capacity
        residual[edge.target][edge.source] = edge.capacity
        adjacency[edge.source].append(edge.target)
        adjacency[edge.target].append(edge.source)
    return residual, adjacency


def _augmenting_path(
    residual: dict[str, dict[str, int]],
    adjacency: dict[str, list[str]],
    source: str,
    sink: str,
) -> dict[str, str] | None:
    """Breadth-first search over edges with spare residual capacity."""
    parent: dict[str, str] = {}
    visited = {source}
    queue = deque([source])
    while queue:
        u = queue.popleft()
        for v in adjacency[u]:
            if v not in visited and residual[u][v] > 0:
                visited.add(v)
                parent[v] = u
                if v == sink:
                    return parent
                queue.append(v)
    return None


def max_flow(network: RoadNetwork, source_id: str, sink_id: str) -> int:
    """Return the maximum number of packages/hour that can move from source to sink.

    Raises ``UnknownNodeError`` for identifiers outside the network. A source
    equal to the sink, or a sink in another component, yields 0.
    """
    network.require(source_id, role="source node")
    network.require(sink_id, role="sink node")
    if source_id == sink_id:
        return 0

    residual, adjacency = _residual_graph(network)
    total = 0
    while True:
        parent = _augmenting_path(residual, adjacency, source_id, sink_id)
        if parent is None:
            break

        bottleneck = None
        v = sink_id
        while v != source_id:
            u = parent[v]
            capacity = residual[u][v]
            bottleneck = capacity if bottleneck is None else min(bottleneck, capacity)
            v = u

        v = sink_id
        while v != source_id:
            u = parent[v]
            residual[u][v] -= bottleneck
            residual[v][u] += bottleneck
            v = u

        total += bottleneck
    return total
