from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.coupon import AppliedCoupon
from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.money import Money


@dataclass(frozen=True)
class ApplyCouponQuery:
    code: str
    subtotal: Money


class ApplyCouponUseCase(Protocol):
    def apply(self, query: ApplyCouponQuery) -> Result[AppliedCoupon, OrderDeskError]: ...
