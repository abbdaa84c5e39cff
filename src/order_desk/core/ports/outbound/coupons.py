from __future__ import annotations

from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.coupon import Coupon
from order_desk.core.domain.model.errors import OrderDeskError


class CouponRegistry(Protocol):
    def lookup(self, code: str) -> Result[Coupon | None, OrderDeskError]:
        """Exact match on the normalized (upper-case) code; inactive coupons are returned too."""
        ...
