from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from order_desk.core.domain.model.money import Money


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class Coupon:
    coupon_id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    is_active: bool = True

    def discount_for(self, subtotal: Money) -> Money:
        """Discount this coupon grants on ``subtotal``, bounded to ``[0, subtotal]``."""
        if self.discount_type is DiscountType.PERCENTAGE:
            raw = subtotal.percent(self.discount_value)
        else:
            raw = Money.of(self.discount_value, subtotal.currency)
        return raw.clamp(Money.zero(subtotal.currency), subtotal)


@dataclass(frozen=True)
class AppliedCoupon:
    coupon_id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Money

    @staticmethod
    def of(coupon: Coupon, subtotal: Money) -> "AppliedCoupon":
        return AppliedCoupon(
            coupon_id=coupon.coupon_id,
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            discount_amount=coupon.discount_for(subtotal),
        )

    def rebase(self, subtotal: Money) -> "AppliedCoupon":
        """Recompute the discount after the cart subtotal changed."""
        coupon = Coupon(
            self.coupon_id, self.code, self.discount_type, self.discount_value
        )
        return AppliedCoupon.of(coupon, subtotal)
