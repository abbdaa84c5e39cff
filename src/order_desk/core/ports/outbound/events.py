from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.order import Order, OrderId
from order_desk.core.domain.model.status import OrderStatus

ORDER_CREATED = "order_created"
STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class OrderChanged:
    order_id: OrderId
    order_number: str
    store_id: str
    event: str
    status: OrderStatus

    @staticmethod
    def of(order: Order, event: str) -> "OrderChanged":
        return OrderChanged(
            order_id=order.order_id,
            order_number=order.order_number,
            store_id=order.store_id,
            event=event,
            status=order.status,
        )


class OrderNotifier(Protocol):
    def notify(self, event: OrderChanged) -> Result[None, OrderDeskError]: ...
