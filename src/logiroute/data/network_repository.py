"""Road network loading, traffic simulation and the current-snapshot store."""

from __future__ import annotations

import functools
import json
import logging
import math
import random
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import settings
from ..models.domain import Edge, NetworkValidationError, Node, RoadNetwork

logger = logging.getLogger(__name__)

# (id, x, y); display names are derived in _demo_name.
DEMO_LOCATIONS: tuple[tuple[str, float, float], ...] = (
    ("warehouse-a", 50, 175),
    ("warehouse-b", 280, 40),
    ("warehouse-c", 450, 250),
    ("warehouse-d", 120, 320),
    ("warehouse-e", 480, 50),
    ("loc1", 120, 50),
    ("loc2", 100, 150),
    ("loc3", 130, 250),
    ("loc4", 210, 320),
    ("loc5", 200, 80),
    ("loc6", 180, 180),
    ("loc7", 220, 280),
    ("loc8", 210, 20),
    ("loc9", 280, 130),
    ("loc10", 300, 220),
    ("loc11", 290, 330),
    ("loc12", 350, 60),
    ("loc13", 330, 175),
    ("loc14", 360, 280),
    ("loc15", 450, 130),
    ("loc16", 420, 180),
    ("loc17", 430, 210),
    ("loc18", 460, 310),
    ("loc19", 480, 175),
    ("loc20", 190, 220),
)

DEMO_CONNECTIONS: tuple[tuple[str, str], ...] = (
    ("warehouse-a", "loc2"), ("warehouse-a", "loc3"),
    ("warehouse-b", "loc5"), ("warehouse-b", "loc8"), ("warehouse-b", "loc9"), ("warehouse-b", "loc12"),
    ("warehouse-c", "loc14"), ("warehouse-c", "loc17"), ("warehouse-c", "loc18"),
    ("warehouse-d", "loc3"), ("warehouse-d", "loc4"), ("warehouse-d", "loc7"),
    ("warehouse-e", "loc12"), ("warehouse-e", "loc15"), ("warehouse-e", "loc19"),
    ("loc1", "loc2"), ("loc1", "loc5"), ("loc1", "loc8"),
    ("loc2", "loc3"), ("loc2", "loc6"),
    ("loc3", "loc4"), ("loc3", "loc7"),
    ("loc4", "loc7"), ("loc4", "loc11"),
    ("loc5", "loc6"), ("loc5", "loc8"), ("loc5", "loc9"),
    ("loc6", "loc9"), ("loc6", "loc20"),
    ("loc7", "loc10"), ("loc7", "loc11"),
    ("loc8", "loc12"),
    ("loc9", "loc12"), ("loc9", "loc13"), ("loc9", "loc20"),
    ("loc10", "loc13"), ("loc10", "loc14"), ("loc10", "loc20"),
    ("loc11", "loc14"),
    ("loc12", "loc15"), ("loc12", "loc13"),
    ("loc13", "loc16"), ("loc13", "loc17"),
    ("loc14", "loc17"), ("loc14", "loc18"),
    ("loc15", "loc16"), ("loc15", "loc19"),
    ("loc16", "loc17"), ("loc16", "loc19"),
    ("loc17", "loc18"), ("loc17", "loc19"),
    ("loc18", "loc19"),
    ("loc20", "loc13"),
)


def _demo_name(node_id: str) -> str:
    if node_id == "warehouse-a":
        return "Depot A"
    if node_id.startswith("warehouse-"):
        return f"Warehouse {node_id.rsplit('-', 1)[1].upper()}"
    return f"Loc {node_id.replace('loc', '')}"


def euclidean_weight(source: Node, target: Node) -> float:
    """Rounded straight-line distance, used only to derive demo edge weights."""
    return float(round(math.hypot(source.x - target.x, source.y - target.y)))


def build_demo_network(
    seed: int | None = None,
    min_capacity: int | None = None,
    max_capacity: int | None = None,
) -> RoadNetwork:
    """Build the demo map with reproducible capacities."""
    rng = random.Random(settings.capacity_seed if seed is None else seed)
    low = settings.min_edge_capacity if min_capacity is None else min_capacity
    high = settings.max_edge_capacity if max_capacity is None else max_capacity

    nodes = [Node(id=node_id, name=_demo_name(node_id), x=x, y=y) for node_id, x, y in DEMO_LOCATIONS]
    lookup = {node.id: node for node in nodes}
    edges = [
        Edge(
            source=source,
            target=target,
            weight=euclidean_weight(lookup[source], lookup[target]),
            capacity=rng.randint(low, high),
        )
        for source, target in DEMO_CONNECTIONS
    ]
    return RoadNetwork.from_parts(nodes, edges)


def network_from_payload(payload: Mapping[str, Any]) -> RoadNetwork:
    """Convert ``{nodes: [{id,name,x,y}], edges: [{source,target,weight,capacity}]}`` into a network."""
    try:
        nodes = [
            Node(
                id=str(row["id"]),
                name=str(row.get("name") or row["id"]),
                x=float(row.get("x", 0.0)),
                y=float(row.get("y", 0.0)),
            )
            for row in payload["nodes"]
        ]
        edges = [
            Edge(
                source=str(row["source"]),
                target=str(row["target"]),
                weight=float(row["weight"]),
                capacity=int(row["capacity"]),
            )
            for row in payload["edges"]
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise NetworkValidationError(f"Malformed network payload: {exc}") from exc
    return RoadNetwork.from_parts(nodes, edges)


def network_to_payload(network: RoadNetwork) -> dict:
    return {
        "nodes": [{"id": n.id, "name": n.name, "x": n.x, "y": n.y} for n in network.nodes],
        "edges": [
            {"source": e.source, "target": e.target, "weight": e.weight, "capacity": e.capacity}
            for e in network.edges
        ],
    }


def load_network(source: Optional[Path] = None) -> RoadNetwork:
    """Load a network from JSON, or the demo network when no file is configured."""
    path = source or settings.network_file
    if path is None:
        return build_demo_network()
    if not path.exists():
        raise FileNotFoundError(f"Network file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return network_from_payload(payload)


def simulate_traffic(
    network: RoadNetwork,
    *,
    base: RoadNetwork | None = None,
    seed: int | None = None,
    min_factor: float | None = None,
    max_factor: float | None = None,
) -> RoadNetwork:
    """Return a new network whose weights are ``base`` weights scaled by random congestion factors.

    Nodes and capacities are carried over unchanged. Scaling always starts from
    ``base`` (default: ``network``) so repeated events do not compound.
    """
    reference = base or network
    low = settings.traffic_min_factor if min_factor is None else min_factor
    high = settings.traffic_max_factor if max_factor is None else max_factor
    if low <= 0 or high < low:
        raise ValueError("Traffic factors must satisfy 0 < min_factor <= max_factor")

    rng = random.Random(seed)
    base_weights = {edge.key: edge.weight for edge in reference.edges}
    edges = []
    for edge in network.edges:
        weight = base_weights.get(edge.key, edge.weight)
        scaled = max(1.0, float(round(weight * rng.uniform(low, high))))
        edges.append(Edge(source=edge.source, target=edge.target, weight=scaled, capacity=edge.capacity))
    return RoadNetwork.from_parts(network.nodes, edges)


class NetworkStore:
    """Holds the current network snapshot and replaces it wholesale.

    Readers take a reference to one snapshot and keep using it for the whole
    run; writers never mutate a snapshot in place.
    """

    def __init__(self, base: RoadNetwork) -> None:
        self._lock = threading.Lock()
        # Writers hold this across read, compute and swap.
        self._write_lock = threading.RLock()
        self._base = base
        self._current = base
        self._version = 1

    @property
    def base(self) -> RoadNetwork:
        return self._base

    def snapshot(self) -> RoadNetwork:
        with self._lock:
            return self._current

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def versioned_snapshot(self) -> tuple[RoadNetwork, int]:
        with self._lock:
            return self._current, self._version

    def replace(self, network: RoadNetwork, *, as_base: bool = False) -> int:
        with self._write_lock, self._lock:
            self._current = network
            if as_base:
                self._base = network
            self._version += 1
            version = self._version
        logger.info(
            f"Network snapshot replaced (version {version}): {len(network.nodes)} nodes, {len(network.edges)} edges"
        )
        return version

    def apply_traffic(self, seed: int | None = None) -> RoadNetwork:
        with self._write_lock:
            with self._lock:
                current = self._current
                base = self._base
            updated = simulate_traffic(current, base=base, seed=seed)
            self.replace(updated)
        return updated

    def reset(self) -> RoadNetwork:
        with self._write_lock:
            with self._lock:
                base = self._base
            self.replace(base)
        return base


@functools.lru_cache(maxsize=1)
def get_network_store() -> NetworkStore:
    return NetworkStore(load_network())
