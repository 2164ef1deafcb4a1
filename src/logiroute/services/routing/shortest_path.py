"""Single-pair Dijkstra and the per-invocation path table built on top of it."""

from __future__ import annotations

import heapq
from itertools import count
from typing import Iterable

from ...models.domain import RoadNetwork
from .models import NoPathFound, PathFound, ShortestPathResult


def shortest_path(network: RoadNetwork, start_id: str, end_id: str) -> ShortestPathResult:
    """Return the minimum-weight path between two nodes.

    Raises ``UnknownNodeError`` when either identifier is missing from the
    network. A disconnected pair yields ``NoPathFound`` rather than an error.
    Equal tentative distances are popped in insertion order, so repeated calls
    always produce the same path.
    """
    network.require(start_id, role="start node")
    network.require(end_id, role="end node")

    if start_id == end_id:
        return PathFound(path=(start_id,), distance=0.0)

    distances: dict[str, float] = {start_id: 0.0}
    previous: dict[str, str] = {}
    settled: set[str] = set()
    sequence = count()
    frontier: list[tuple[float, int, str]] = [(0.0, next(sequence), start_id)]

    while frontier:
        distance, _, node_id = heapq.heappop(frontier)
        if node_id in settled:
            continue
        settled.add(node_id)

        if node_id == end_id:
            path = [end_id]
            while path[-1] != start_id:
                path.append(previous[path[-1]])
            path.reverse()
            return PathFound(path=tuple(path), distance=distance)

        for neighbor, weight in network.neighbors(node_id):
            if neighbor in settled:
                continue
            candidate = distance + weight
            if candidate < distances.get(neighbor, float("inf")):
                distances[neighbor] = candidate
                previous[neighbor] = node_id
                heapq.heappush(frontier, (candidate, next(sequence), neighbor))

    return NoPathFound(start=start_id, end=end_id)


class PathTable:
    """All-pairs shortest paths restricted to a small set of relevant nodes.

    Built once per tour so the greedy phases only do dictionary lookups.
    Reverse entries reuse the forward search since edges are undirected.
    """

    def __init__(self, network: RoadNetwork, node_ids: Iterable[str]) -> None:
        self.node_ids: list[str] = list(dict.fromkeys(node_ids))
        network.require(self.node_ids)
        self._entries: dict[tuple[str, str], ShortestPathResult] = {}
        for i, source in enumerate(self.node_ids):
            self._entries[(source, source)] = PathFound(path=(source,), distance=0.0)
            for target in self.node_ids[i + 1 :]:
                result = shortest_path(network, source, target)
                self._entries[(source, target)] = result
                if isinstance(result, PathFound):
                    self._entries[(target, source)] = PathFound(
                        path=tuple(reversed(result.path)), distance=result.distance
                    )
                else:
                    self._entries[(target, source)] = NoPathFound(start=target, end=source)

    def __len__(self) -> int:
        return len(self.node_ids)

    def lookup(self, source: str, target: str) -> ShortestPathResult:
        return self._entries[(source, target)]

    def distance(self, source: str, target: str) -> float:
        return self._entries[(source, target)].distance
