"""Delivery strategy composition: direct-ship, consolidated and warehouse-batched plans."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import CustomerStop, LineItem, Order, RoadNetwork
from .cost import CostModel
from .max_flow import max_flow
from .models import (
    CapacityDiagnostic,
    PathFound,
    PlanComparison,
    StrategyName,
    StrategyPlan,
    TruckRoute,
    UnreachableStop,
)
from .shortest_path import shortest_path
from .tour import build_tour

logger = logging.getLogger(__name__)


def active_orders(orders: Sequence[Order]) -> list[Order]:
    return [order for order in orders if order.is_active]


def _customer_stops(orders: Sequence[Order]) -> list[CustomerStop]:
    return [CustomerStop(address=order.address, time_window=order.time_window) for order in orders]


def _plan(strategy: StrategyName, trucks: list[TruckRoute], **extra) -> StrategyPlan:
    return StrategyPlan(
        strategy=strategy,
        trucks=trucks,
        total_distance=sum(truck.distance for truck in trucks),
        total_cost=sum(truck.cost for truck in trucks),
        **extra,
    )


class StrategyComposer:
    """Turns an order snapshot into comparable delivery plans over one network snapshot.

    Nothing here mutates the network or the orders, so the four computations
    in :meth:`compose` can run on separate worker threads.
    """

    def __init__(
        self,
        network: RoadNetwork,
        *,
        depot_id: str | None = None,
        truck_capacity: int | None = None,
        cost_model: CostModel | None = None,
        workers: int | None = None,
    ) -> None:
        self.network = network
        self.depot_id = depot_id or settings.depot_id
        self.truck_capacity = truck_capacity if truck_capacity is not None else settings.truck_capacity
        if self.truck_capacity < 1:
            raise ValueError("truck_capacity must be >= 1")
        self.cost_model = cost_model or CostModel()
        self.workers = workers if workers is not None else settings.strategy_workers

    def validate(self, orders: Sequence[Order]) -> None:
        """Fail fast on identifiers the network does not know."""
        self.network.require(self.depot_id, role="depot")
        for order in orders:
            self.network.require(order.address, role=f"address of order '{order.order_id}'")
            self.network.require(order.warehouse_ids(), role=f"warehouse of order '{order.order_id}'")

    def direct_ship(self, orders: Sequence[Order]) -> StrategyPlan:
        """One truck per (order, warehouse) pair, straight from the warehouse to the customer."""
        trucks: list[TruckRoute] = []
        unreachable: list[UnreachableStop] = []
        for order in active_orders(orders):
            groups: dict[str, list[LineItem]] = {}
            for item in order.items:
                groups.setdefault(item.warehouse_id, []).append(item)

            for warehouse_id, items in groups.items():
                result = shortest_path(self.network, warehouse_id, order.address)
                if not isinstance(result, PathFound):
                    logger.warning(
                        f"No path from '{warehouse_id}' to '{order.address}' for order '{order.order_id}'"
                    )
                    unreachable.append(
                        UnreachableStop(node_id=order.address, role="customer", phase=f"direct from {warehouse_id}")
                    )
                    continue
                trucks.append(
                    TruckRoute(
                        truck_id=f"{order.order_id}:{warehouse_id}",
                        origin=warehouse_id,
                        path=result.path,
                        distance=result.distance,
                        cost=self.cost_model.truck_cost(result.distance),
                        item_count=len(items),
                        order_ids=(order.order_id,),
                        stops=(order.address,),
                    )
                )
        return _plan("direct", trucks, unreachable=unreachable)

    def consolidated(self, orders: Sequence[Order]) -> StrategyPlan:
        """A single truck leaves the depot, collects from every warehouse and serves every customer."""
        active = active_orders(orders)
        if not active:
            return _plan("consolidated", [])

        warehouses: dict[str, None] = {}
        for order in active:
            for warehouse_id in order.warehouse_ids():
                warehouses.setdefault(warehouse_id, None)

        tour = build_tour(self.network, self.depot_id, warehouses, _customer_stops(active))
        truck = TruckRoute(
            truck_id="consolidated-1",
            origin=self.depot_id,
            path=tour.path,
            distance=tour.distance,
            cost=self.cost_model.truck_cost(tour.distance),
            item_count=sum(len(order.items) for order in active),
            order_ids=tuple(order.order_id for order in active),
            stops=tour.stops,
        )
        return _plan("consolidated", [truck], unreachable=list(tour.unreachable))

    def warehouse_batched(self, orders: Sequence[Order]) -> StrategyPlan:
        """Per warehouse, split pending items into truck-sized chunks and tour each chunk's customers."""
        pending: dict[str, list[tuple[Order, LineItem]]] = {}
        for order in active_orders(orders):
            for item in order.items:
                pending.setdefault(item.warehouse_id, []).append((order, item))

        trucks: list[TruckRoute] = []
        unreachable: list[UnreachableStop] = []
        batch_sizes: dict[str, list[int]] = {}
        for warehouse_id, pairs in pending.items():
            sizes: list[int] = []
            for number, offset in enumerate(range(0, len(pairs), self.truck_capacity), start=1):
                chunk = pairs[offset : offset + self.truck_capacity]
                chunk_orders = list({order.order_id: order for order, _ in chunk}.values())
                tour = build_tour(self.network, warehouse_id, (), _customer_stops(chunk_orders))
                unreachable.extend(tour.unreachable)
                sizes.append(len(chunk))
                trucks.append(
                    TruckRoute(
                        truck_id=f"{warehouse_id}:truck-{number}",
                        origin=warehouse_id,
                        path=tour.path,
                        distance=tour.distance,
                        cost=self.cost_model.truck_cost(tour.distance),
                        item_count=len(chunk),
                        order_ids=tuple(order.order_id for order in chunk_orders),
                        stops=tour.stops,
                    )
                )
            batch_sizes[warehouse_id] = sizes
            logger.debug(f"Warehouse '{warehouse_id}': {len(pairs)} items over {len(sizes)} truck(s) {sizes}")
        return _plan("batched", trucks, unreachable=unreachable, batch_sizes=batch_sizes)

    def capacity_diagnostic(self, primary: Order | None) -> CapacityDiagnostic | None:
        """Max flow from the primary order's nearest source warehouse to its address.

        Returns None when there is no order, no items or no reachable warehouse.
        """
        if primary is None or not primary.is_active:
            return None

        nearest: PathFound | None = None
        nearest_id = ""
        for warehouse_id in primary.warehouse_ids():
            result = shortest_path(self.network, warehouse_id, primary.address)
            if isinstance(result, PathFound) and (nearest is None or result.distance < nearest.distance):
                nearest = result
                nearest_id = warehouse_id
        if nearest is None:
            return None

        return CapacityDiagnostic(
            order_id=primary.order_id,
            warehouse_id=nearest_id,
            destination=primary.address,
            distance=nearest.distance,
            max_flow=max_flow(self.network, nearest_id, primary.address),
        )

    def compose(self, orders: Sequence[Order], primary_order_id: str | None = None) -> PlanComparison:
        """Compute all three plans plus the capacity diagnostic from one order snapshot."""
        self.validate(orders)
        active = active_orders(orders)
        primary = _select_primary(orders, active, primary_order_id)

        tasks: dict[str, Callable[[], object]] = {
            "direct": lambda: self.direct_ship(active),
            "consolidated": lambda: self.consolidated(active),
            "batched": lambda: self.warehouse_batched(active),
            "capacity": lambda: self.capacity_diagnostic(primary),
        }

        start_time = time.time()
        results: dict[str, object] = {}
        if self.workers <= 1:
            for name, task in tasks.items():
                results[name] = task()
        else:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(tasks))) as executor:
                futures = {executor.submit(task): name for name, task in tasks.items()}
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
        logger.info(
            f"Composed strategies for {len(active)} active order(s) in {time.time() - start_time:.3f}s"
        )

        return PlanComparison(
            direct=results["direct"],
            consolidated=results["consolidated"],
            batched=results["batched"],
            capacity=results["capacity"],
            active_order_count=len(active),
        )


def _select_primary(orders: Sequence[Order], active: Sequence[Order], primary_order_id: str | None) -> Order | None:
    if primary_order_id is None:
        return active[0] if active else None
    for order in orders:
        if order.order_id == primary_order_id:
            return order
    raise ValueError(f"Primary order '{primary_order_id}' is not in the order list.")


def compose_strategies(
    network: RoadNetwork,
    orders: Sequence[Order],
    *,
    primary_order_id: str | None = None,
    depot_id: str | None = None,
    truck_capacity: int | None = None,
    cost_model: CostModel | None = None,
    workers: int | None = None,
) -> PlanComparison:
    composer = StrategyComposer(
        network,
        depot_id=depot_id,
        truck_capacity=truck_capacity,
        cost_model=cost_model,
        workers=workers,
    )
    return composer.compose(orders, primary_order_id=primary_order_id)
