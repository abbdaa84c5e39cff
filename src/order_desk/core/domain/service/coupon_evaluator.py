from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.coupon import AppliedCoupon, Coupon, normalize_code
from order_desk.core.domain.model.errors import (
    CouponInactive,
    CouponNotFound,
    OrderDeskError,
    ValidationFailed,
)
from order_desk.core.ports.inbound.apply_coupon import (
    ApplyCouponQuery,
    ApplyCouponUseCase,
)
from order_desk.core.ports.outbound.coupons import CouponRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouponEvaluatorDeps:
    coupons: CouponRegistry


@dataclass(frozen=True)
class CouponEvaluator(ApplyCouponUseCase):
    deps: CouponEvaluatorDeps

    def apply(self, query: ApplyCouponQuery) -> Result[AppliedCoupon, OrderDeskError]:
        code = normalize_code(query.code)
        if not code:
            return Failure(ValidationFailed("coupon code is required", field_name="code"))
        if query.subtotal.is_negative():
            return Failure(
                ValidationFailed("subtotal must be >= 0", field_name="subtotal")
            )

        return (
            self.deps.coupons.lookup(code)
            .bind(lambda found: _require_active(code, found))
            .map(lambda coupon: AppliedCoupon.of(coupon, query.subtotal))
        )

    def apply_to_cart(self, cart: Cart, code: str) -> Result[AppliedCoupon, OrderDeskError]:
        """Evaluate ``code`` against the cart and fill its coupon slot."""
        if cart.coupon is not None:
            # fail before touching the registry
            return cart.apply_coupon(cart.coupon)
        return self.apply(ApplyCouponQuery(code, cart.subtotal())).bind(
            cart.apply_coupon
        )

    @staticmethod
    def remove(cart: Cart) -> None:
        cart.remove_coupon()


def _require_active(
    code: str, coupon: Coupon | None
) -> Result[Coupon, OrderDeskError]:
    if coupon is None:
        logger.info("coupon %s not found", code)
        return Failure(CouponNotFound(message="coupon not found or expired", code=code))
    if not coupon.is_active:
        logger.info("coupon %s is inactive", code)
        return Failure(CouponInactive(message="coupon is no longer active", code=code))
    return Success(coupon)
