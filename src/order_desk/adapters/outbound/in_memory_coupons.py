from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from returns.result import Result, Success

from order_desk.core.domain.model.coupon import Coupon, normalize_code
from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.ports.outbound.coupons import CouponRegistry


@dataclass
class InMemoryCouponRegistry(CouponRegistry):
    _by_code: Dict[str, Coupon] = field(default_factory=dict)

    def put(self, *items: Coupon) -> None:
        for c in items:
            self._by_code[normalize_code(c.code)] = c

    def lookup(self, code: str) -> Result[Coupon | None, OrderDeskError]:
        return Success(self._by_code.get(normalize_code(code)))
