from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Tuple, Union
from uuid import UUID, uuid4

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.errors import IllegalTransition, OrderDeskError
from order_desk.core.domain.model.money import Money, fold_money
from order_desk.core.domain.model.status import (
    FulfillmentType,
    OrderStatus,
    can_transition,
    is_terminal,
)

ORDER_SOURCE = "phone"
PAYMENT_METHOD = "cash"
PAYMENT_STATUS = "pending"

_BASE36 = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class OrderId:
    value: UUID

    @staticmethod
    def new() -> "OrderId":
        return OrderId(uuid4())

    @staticmethod
    def parse(raw: str) -> "OrderId":
        return OrderId(UUID(raw))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Customer:
    name: str
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip_code: str
    phone: str | None = None
    notes: str | None = None

    def missing_fields(self) -> Tuple[str, ...]:
        required = {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }
        return tuple(k for k, v in required.items() if not (v or "").strip())


@dataclass(frozen=True)
class Pickup:
    person_name: str | None = None

    @property
    def kind(self) -> FulfillmentType:
        return FulfillmentType.PICKUP


@dataclass(frozen=True)
class Delivery:
    address: DeliveryAddress

    @property
    def kind(self) -> FulfillmentType:
        return FulfillmentType.DELIVERY


FulfillmentDetails = Union[Pickup, Delivery]


@dataclass(frozen=True)
class OrderItem:
    inventory_id: str
    product_id: str
    name: str
    quantity: int
    unit_price: Money

    def line_subtotal(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    """A committed order.

    ``items`` and the money fields never change after creation; status moves
    only through ``transition``.
    """

    order_id: OrderId
    order_number: str
    store_id: str
    customer: Customer
    items: Tuple[OrderItem, ...]
    discount_amount: Money
    fulfillment: FulfillmentDetails
    status: OrderStatus
    created_at: datetime
    coupon_id: str | None = None
    coupon_code: str | None = None
    notes: str | None = None
    updated_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def currency(self) -> str:
        return self.discount_amount.currency

    @property
    def fulfillment_type(self) -> FulfillmentType:
        return self.fulfillment.kind

    @property
    def order_source(self) -> str:
        return ORDER_SOURCE

    @property
    def payment_method(self) -> str:
        return PAYMENT_METHOD

    @property
    def payment_status(self) -> str:
        return PAYMENT_STATUS

    def subtotal(self) -> Money:
        return fold_money((it.line_subtotal() for it in self.items), self.currency)

    def total(self) -> Money:
        diff = self.subtotal() - self.discount_amount
        if diff.is_negative():
            return Money.zero(self.currency)
        return diff

    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def transition(
        self, target: OrderStatus, at: datetime | None = None
    ) -> Result["Order", OrderDeskError]:
        if self.is_terminal() and target is not OrderStatus.REFUNDED:
            return Failure(
                IllegalTransition(
                    message=f"order {self.order_number} is already {self.status.value}",
                    current=self.status.value,
                    target=target.value,
                )
            )
        if not can_transition(self.status, target):
            return Failure(
                IllegalTransition(
                    message=f"{target.value} is not reachable from {self.status.value}",
                    current=self.status.value,
                    target=target.value,
                )
            )

        ts = at or now_utc()
        moved = replace(self, status=target, updated_at=ts)
        if target is OrderStatus.CONFIRMED:
            moved = replace(moved, confirmed_at=ts)
        elif target in (OrderStatus.DELIVERED, OrderStatus.COMPLETED):
            moved = replace(moved, completed_at=ts)
        elif target is OrderStatus.CANCELLED:
            moved = replace(moved, cancelled_at=ts)
        return Success(moved)


def new_order_number(at: datetime | None = None) -> str:
    """``ORD-<base36 epoch millis>-<4 random base36 chars>``."""
    millis = int((at or now_utc()).timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"ORD-{_to_base36(millis)}-{suffix}"


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
