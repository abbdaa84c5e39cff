from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Sequence, Set

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.errors import (
    InsufficientStock,
    OrderDeskError,
    OrderNotFound,
    OrderNumberTaken,
    PersistenceFailure,
)
from order_desk.core.domain.model.inventory import (
    InventoryLine,
    StockDecrement,
    StockShortage,
)
from order_desk.core.domain.model.order import Order, OrderId
from order_desk.core.domain.model.status import OrderStatus
from order_desk.core.ports.outbound.inventory import InventoryReader
from order_desk.core.ports.outbound.orders import OrderFilter, OrderStore


@dataclass
class InMemoryStore(InventoryReader, OrderStore):
    """Inventory and orders in dicts; one lock stands in for the database transaction."""

    _inventory: Dict[str, InventoryLine] = field(default_factory=dict)
    _orders: Dict[str, Order] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def put_inventory(self, *lines: InventoryLine) -> None:
        with self._lock:
            for ln in lines:
                self._inventory[ln.inventory_id] = ln

    def available(self, inventory_id: str) -> int:
        with self._lock:
            line = self._inventory.get(inventory_id)
            return line.available_quantity if line else 0

    # ---- InventoryReader ---------------------------------------------------

    def sellable(self, store_id: str) -> Result[Sequence[InventoryLine], OrderDeskError]:
        with self._lock:
            lines = [
                ln
                for ln in self._inventory.values()
                if ln.store_id == store_id and ln.available_quantity > 0
            ]
        return Success(tuple(lines))

    # ---- OrderStore --------------------------------------------------------

    def commit(
        self, order: Order, decrements: Sequence[StockDecrement]
    ) -> Result[Order, OrderDeskError]:
        with self._lock:
            if any(o.order_number == order.order_number for o in self._orders.values()):
                return Failure(
                    OrderNumberTaken(
                        message="order_number already exists",
                        order_number=order.order_number,
                    )
                )
            key = str(order.order_id)
            if key in self._orders:
                return Failure(PersistenceFailure(message="order_id already exists"))

            # check every line first (no partial decrement)
            requested: Dict[str, int] = {}
            for d in decrements:
                requested[d.inventory_id] = requested.get(d.inventory_id, 0) + d.quantity

            checked: Set[str] = set()
            shortages = []
            for d in decrements:
                if d.inventory_id in checked:
                    continue
                checked.add(d.inventory_id)
                line = self._inventory.get(d.inventory_id)
                available = 0
                if line is not None and line.store_id == order.store_id:
                    available = line.available_quantity
                if available < requested[d.inventory_id]:
                    shortages.append(
                        StockShortage(
                            inventory_id=d.inventory_id,
                            product_id=d.product_id,
                            name=d.name,
                            requested=requested[d.inventory_id],
                            available=available,
                        )
                    )
            if shortages:
                return Failure(
                    InsufficientStock(
                        message="stock changed since the cart was built",
                        shortages=tuple(shortages),
                    )
                )

            for inventory_id, qty in requested.items():
                line = self._inventory[inventory_id]
                self._inventory[inventory_id] = replace(
                    line, available_quantity=line.available_quantity - qty
                )
            self._orders[key] = order
            return Success(order)

    def get(self, order_id: OrderId) -> Result[Order, OrderDeskError]:
        key = str(order_id)
        with self._lock:
            order = self._orders.get(key)
        if order is None:
            return Failure(OrderNotFound(message="order not found", order_id=key))
        return Success(order)

    def list(
        self, store_id: str, order_filter: OrderFilter | None = None
    ) -> Result[Sequence[Order], OrderDeskError]:
        flt = order_filter or OrderFilter()
        with self._lock:
            orders = [o for o in self._orders.values() if o.store_id == store_id]

        if flt.statuses is not None:
            orders = [o for o in orders if o.status in flt.statuses]
        if flt.search:
            needle = flt.search.lower()
            orders = [
                o
                for o in orders
                if needle in o.order_number.lower() or needle in o.customer.name.lower()
            ]

        return Success(tuple(sorted(orders, key=lambda o: o.created_at, reverse=True)))

    def update_status(
        self, order: Order, expected: OrderStatus
    ) -> Result[Order, OrderDeskError]:
        key = str(order.order_id)
        with self._lock:
            current = self._orders.get(key)
            if current is None:
                return Failure(OrderNotFound(message="order not found", order_id=key))
            if current.status is not expected:
                return Failure(
                    PersistenceFailure(
                        message=f"order {current.order_number} changed concurrently; reload and retry"
                    )
                )
            self._orders[key] = order
        return Success(order)
