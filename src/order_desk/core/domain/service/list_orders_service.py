from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Sequence

from returns.result import Failure, Result

from order_desk.core.domain.model.errors import OrderDeskError, ValidationFailed
from order_desk.core.domain.model.order import Order
from order_desk.core.domain.model.status import OrderStatus
from order_desk.core.ports.inbound.list_orders import (
    ListOrdersQuery,
    ListOrdersUseCase,
)
from order_desk.core.ports.outbound.orders import OrderFilter, OrderStore

# the "delivered" tab of the board groups both ways an order can finish
_STATUS_GROUPS = {
    OrderStatus.DELIVERED: frozenset({OrderStatus.DELIVERED, OrderStatus.COMPLETED}),
}


@dataclass(frozen=True)
class ListOrdersDeps:
    orders: OrderStore


@dataclass(frozen=True)
class ListOrdersService(ListOrdersUseCase):
    deps: ListOrdersDeps

    def list_orders(
        self, query: ListOrdersQuery
    ) -> Result[Sequence[Order], OrderDeskError]:
        if not query.store_id.strip():
            return Failure(ValidationFailed("store_id is required", field_name="store_id"))

        statuses: FrozenSet[OrderStatus] | None = None
        if query.status is not None and query.status != "all":
            try:
                status = OrderStatus(query.status)
            except ValueError:
                return Failure(
                    ValidationFailed(
                        f"unknown status {query.status!r}", field_name="status"
                    )
                )
            statuses = _STATUS_GROUPS.get(status, frozenset({status}))

        search = (query.search or "").strip() or None
        return self.deps.orders.list(
            query.store_id, OrderFilter(statuses=statuses, search=search)
        )
