from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.coupon import AppliedCoupon
from order_desk.core.domain.model.errors import (
    CouponAlreadyApplied,
    OrderDeskError,
    ValidationFailed,
)
from order_desk.core.domain.model.money import DEFAULT_CURRENCY, Money, fold_money


@dataclass(frozen=True)
class CartLine:
    inventory_id: str
    product_id: str
    name: str
    unit_price: Money
    quantity: int
    max_quantity: int

    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    """Selected lines of one staff session.

    Every line keeps ``1 <= quantity <= max_quantity``, where ``max_quantity``
    is the stock figure shown when the product was picked. That figure may be
    stale; stock is only authoritative at commit time.

    The coupon slot is write-once: applying a second coupon requires
    ``remove_coupon`` first.
    """

    currency: str = DEFAULT_CURRENCY
    _lines: list[CartLine] = field(default_factory=list)
    _coupon: AppliedCoupon | None = None

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def coupon(self) -> AppliedCoupon | None:
        if self._coupon is None:
            return None
        return self._coupon.rebase(self.subtotal())

    def is_empty(self) -> bool:
        return not self._lines

    def add_line(
        self,
        inventory_id: str,
        product_id: str,
        name: str,
        unit_price: Money,
        max_quantity: int,
    ) -> Result[CartLine, OrderDeskError]:
        idx = self._index_of(product_id)
        if idx is not None:
            line = self._lines[idx]
            bumped = replace(line, quantity=min(line.quantity + 1, line.max_quantity))
            self._lines[idx] = bumped
            return Success(bumped)

        if max_quantity < 1:
            return Failure(
                ValidationFailed(
                    f"{name} is out of stock", field_name="max_quantity"
                )
            )
        if unit_price.is_negative():
            return Failure(
                ValidationFailed("unit_price must be >= 0", field_name="unit_price")
            )

        line = CartLine(
            inventory_id=inventory_id,
            product_id=product_id,
            name=name,
            unit_price=unit_price,
            quantity=1,
            max_quantity=max_quantity,
        )
        self._lines.append(line)
        return Success(line)

    def set_quantity(
        self, product_id: str, quantity: int
    ) -> Result[None, OrderDeskError]:
        if quantity < 1:
            return Failure(
                ValidationFailed(
                    "quantity must be >= 1; remove the line instead",
                    field_name="quantity",
                )
            )
        idx = self._index_of(product_id)
        if idx is None:
            return Success(None)

        line = self._lines[idx]
        self._lines[idx] = replace(line, quantity=min(quantity, line.max_quantity))
        return Success(None)

    def remove_line(self, product_id: str) -> None:
        self._lines = [ln for ln in self._lines if ln.product_id != product_id]

    def subtotal(self) -> Money:
        return fold_money((ln.subtotal() for ln in self._lines), self.currency)

    # ---- coupon slot -------------------------------------------------------

    def apply_coupon(
        self, applied: AppliedCoupon
    ) -> Result[AppliedCoupon, OrderDeskError]:
        if self._coupon is not None:
            return Failure(
                CouponAlreadyApplied(
                    f"coupon {self._coupon.code} is already applied; remove it first",
                    field_name="coupon_code",
                )
            )
        self._coupon = applied
        return Success(applied)

    def remove_coupon(self) -> None:
        self._coupon = None

    def discount(self) -> Money:
        coupon = self.coupon
        if coupon is None:
            return Money.zero(self.currency)
        return coupon.discount_amount

    def total(self) -> Money:
        return (self.subtotal() - self.discount()).clamp(
            Money.zero(self.currency), self.subtotal()
        )

    def _index_of(self, product_id: str) -> int | None:
        for i, ln in enumerate(self._lines):
            if ln.product_id == product_id:
                return i
        return None
