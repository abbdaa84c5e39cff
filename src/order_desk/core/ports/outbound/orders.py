from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Protocol, Sequence

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.inventory import StockDecrement
from order_desk.core.domain.model.order import Order, OrderId
from order_desk.core.domain.model.status import OrderStatus


@dataclass(frozen=True)
class OrderFilter:
    statuses: FrozenSet[OrderStatus] | None = None
    search: str | None = None


class OrderStore(Protocol):
    """
    Persistence for orders and the stock they consume.

    ``commit`` is the single unit of work of the order desk: every decrement
    is a conditional update (``quantity >= requested``) and the order row,
    its items and all decrements land in one transaction or not at all.
    """

    def commit(
        self, order: Order, decrements: Sequence[StockDecrement]
    ) -> Result[Order, OrderDeskError]:
        """InsufficientStock lists every short line; OrderNumberTaken on a duplicate number."""
        ...

    def get(self, order_id: OrderId) -> Result[Order, OrderDeskError]: ...

    def list(
        self, store_id: str, order_filter: OrderFilter | None = None
    ) -> Result[Sequence[Order], OrderDeskError]: ...

    def update_status(
        self, order: Order, expected: OrderStatus
    ) -> Result[Order, OrderDeskError]:
        """Compare-and-set on status; PersistenceFailure if it moved underneath us."""
        ...
