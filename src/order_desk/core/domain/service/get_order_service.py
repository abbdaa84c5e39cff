from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result

from order_desk.core.domain.model.errors import OrderDeskError, ValidationFailed
from order_desk.core.domain.model.order import Order, OrderId
from order_desk.core.ports.inbound.get_order import GetOrderQuery, GetOrderUseCase
from order_desk.core.ports.outbound.orders import OrderStore


@dataclass(frozen=True)
class GetOrderDeps:
    orders: OrderStore


@dataclass(frozen=True)
class GetOrderService(GetOrderUseCase):
    deps: GetOrderDeps

    def get_order(self, query: GetOrderQuery) -> Result[Order, OrderDeskError]:
        try:
            oid = OrderId.parse(query.order_id)
        except ValueError:
            return Failure(
                ValidationFailed("order_id must be a valid UUID", field_name="order_id")
            )

        return self.deps.orders.get(oid)
