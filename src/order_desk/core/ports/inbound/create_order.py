from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.order import Customer, FulfillmentDetails, Order


@dataclass(frozen=True)
class CreateOrderCommand:
    store_id: str
    cart: Cart
    customer: Customer
    fulfillment: FulfillmentDetails
    coupon_code: str | None = None  # falls back to the coupon applied on the cart
    notes: str | None = None


class CreateOrderUseCase(Protocol):
    def create_order(self, command: CreateOrderCommand) -> Result[Order, OrderDeskError]: ...
