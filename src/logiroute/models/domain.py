"""Domain models for the road network and customer orders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Sequence

TimeWindow = Literal["any", "morning", "afternoon"]


class UnknownNodeError(ValueError):
    """Raised when an identifier does not exist in the current network snapshot."""

    def __init__(self, node_id: str, role: str = "node") -> None:
        super().__init__(f"Unknown {role} '{node_id}': not present in the road network.")
        self.node_id = node_id
        self.role = role


class NetworkValidationError(ValueError):
    """Raised when a node/edge set does not form a simple undirected graph."""


@dataclass(frozen=True, slots=True)
class Node:
    """A location on the map. Coordinates are for display only, never for routing."""

    id: str
    name: str
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Edge:
    """Undirected road segment with a traversal weight and a capacity in packages/hour."""

    source: str
    target: str
    weight: float
    capacity: int

    @property
    def key(self) -> frozenset[str]:
        return frozenset((self.source, self.target))


@dataclass(frozen=True, slots=True)
class LineItem:
    item_id: str
    name: str
    warehouse_id: str


@dataclass(frozen=True, slots=True)
class Order:
    """A customer order: destination node, requested time window and line items."""

    order_id: str
    address: str
    items: tuple[LineItem, ...] = ()
    time_window: TimeWindow = "any"

    @property
    def is_active(self) -> bool:
        return bool(self.items)

    def warehouse_ids(self) -> list[str]:
        """Source warehouses in first-seen order."""
        seen: dict[str, None] = {}
        for item in self.items:
            seen.setdefault(item.warehouse_id, None)
        return list(seen)


@dataclass(frozen=True, slots=True)
class CustomerStop:
    address: str
    time_window: TimeWindow = "any"


@dataclass(frozen=True, slots=True)
class RoadNetwork:
    """Immutable snapshot of the road graph shared read-only by all algorithms.

    Traffic changes never mutate a snapshot; they produce a new ``RoadNetwork``.
    """

    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]
    _index: dict[str, Node] = field(init=False, repr=False, compare=False)
    _adjacency: dict[str, tuple[tuple[str, float], ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, Node] = {}
        for node in self.nodes:
            if node.id in index:
                raise NetworkValidationError(f"Duplicate node id '{node.id}'.")
            index[node.id] = node

        adjacency: dict[str, list[tuple[str, float]]] = {node.id: [] for node in self.nodes}
        seen_pairs: set[frozenset[str]] = set()
        for edge in self.edges:
            if edge.source == edge.target:
                raise NetworkValidationError(f"Self-loop on '{edge.source}' is not allowed.")
            for endpoint in (edge.source, edge.target):
                if endpoint not in index:
                    raise NetworkValidationError(
                        f"Edge {edge.source}-{edge.target} references unknown node '{endpoint}'."
                    )
            if edge.key in seen_pairs:
                raise NetworkValidationError(f"Duplicate edge between '{edge.source}' and '{edge.target}'.")
            if edge.weight < 0:
                raise NetworkValidationError(f"Edge {edge.source}-{edge.target} has a negative weight.")
            if edge.capacity <= 0:
                raise NetworkValidationError(f"Edge {edge.source}-{edge.target} must have a positive capacity.")
            seen_pairs.add(edge.key)
            adjacency[edge.source].append((edge.target, edge.weight))
            adjacency[edge.target].append((edge.source, edge.weight))

        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_adjacency", {node_id: tuple(items) for node_id, items in adjacency.items()})

    @classmethod
    def from_parts(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> RoadNetwork:
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def node(self, node_id: str) -> Node:
        try:
            return self._index[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def neighbors(self, node_id: str) -> tuple[tuple[str, float], ...]:
        """(neighbor, weight) pairs in edge insertion order."""
        return self._adjacency[node_id]

    def require(self, node_ids: Sequence[str] | str, role: str = "node") -> None:
        """Raise UnknownNodeError for the first identifier missing from the snapshot."""
        if isinstance(node_ids, str):
            node_ids = (node_ids,)
        for node_id in node_ids:
            if node_id not in self._index:
                raise UnknownNodeError(node_id, role)

    def warehouses(self) -> list[Node]:
        return [node for node in self.nodes if "warehouse" in node.id]
