from decimal import Decimal

import pytest

from order_desk.core.domain.model.errors import (
    CouponAlreadyApplied,
    CouponInactive,
    CouponNotFound,
    ValidationFailed,
)
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.service.coupon_evaluator import (
    CouponEvaluator,
    CouponEvaluatorDeps,
)
from order_desk.core.ports.inbound.apply_coupon import ApplyCouponQuery
from tests.fakes import cart_of, default_coupons, line


@pytest.fixture
def evaluator():
    return CouponEvaluator(CouponEvaluatorDeps(coupons=default_coupons()))


def test_code_is_case_and_space_insensitive(evaluator):
    applied = evaluator.apply(ApplyCouponQuery("  tenOff ", Money.of("80.00"))).unwrap()
    assert applied.code == "TENOFF"
    assert applied.discount_value == Decimal("10")
    assert applied.discount_amount == Money.of("8.00")


@pytest.mark.parametrize(
    "code, error",
    [("missing", CouponNotFound), ("EXPIRED", CouponInactive), ("  ", ValidationFailed)],
)
def test_rejections(evaluator, code, error):
    result = evaluator.apply(ApplyCouponQuery(code, Money.of("10.00")))
    assert type(result.failure()) is error


def test_negative_subtotal_rejected(evaluator):
    result = evaluator.apply(ApplyCouponQuery("TENOFF", Money.of("-1.00")))
    assert result.failure().field_name == "subtotal"


def test_apply_to_cart_fills_slot_once(evaluator):
    cart = cart_of((line(price="20.00"), 2))

    evaluator.apply_to_cart(cart, "FIFTY").unwrap()
    assert cart.total() == Money.of("0.00")

    again = evaluator.apply_to_cart(cart, "TENOFF")
    assert isinstance(again.failure(), CouponAlreadyApplied)
    assert cart.coupon.code == "FIFTY"

    evaluator.remove(cart)
    evaluator.apply_to_cart(cart, "TENOFF").unwrap()
    assert cart.total() == Money.of("36.00")
