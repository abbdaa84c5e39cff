"""Unit tests for the Cart aggregate."""

import random
from decimal import Decimal

import pytest
from returns.result import Failure, Success

from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.coupon import AppliedCoupon, Coupon, DiscountType
from order_desk.core.domain.model.errors import CouponAlreadyApplied, ValidationFailed
from order_desk.core.domain.model.money import Money


def _cart_with(qty_ceiling: int = 3, price: str = "10.00") -> Cart:
    cart = Cart()
    cart.add_line("inv-1", "p-1", "Widget", Money.of(price), qty_ceiling)
    return cart


class TestAddLine:

    def test_new_line_starts_at_one(self):
        cart = _cart_with()
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 1

    def test_same_product_increments_instead_of_duplicating(self):
        cart = _cart_with()
        cart.add_line("inv-1", "p-1", "Widget", Money.of("10.00"), 3)
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 2

    def test_increment_clamped_to_max_quantity(self):
        cart = _cart_with(qty_ceiling=2)
        for _ in range(5):
            cart.add_line("inv-1", "p-1", "Widget", Money.of("10.00"), 2)
        assert cart.lines[0].quantity == 2

    def test_out_of_stock_product_rejected(self):
        cart = Cart()
        result = cart.add_line("inv-9", "p-9", "Gone", Money.of("1.00"), 0)
        assert isinstance(result, Failure)
        assert isinstance(result.failure(), ValidationFailed)
        assert cart.is_empty()


class TestSetQuantity:

    def test_clamps_to_max(self):
        cart = _cart_with(qty_ceiling=3)
        assert cart.set_quantity("p-1", 99) == Success(None)
        assert cart.lines[0].quantity == 3

    def test_below_one_rejected(self):
        cart = _cart_with()
        cart.set_quantity("p-1", 2)
        result = cart.set_quantity("p-1", 0)
        assert isinstance(result, Failure)
        assert result.failure().field_name == "quantity"
        assert cart.lines[0].quantity == 2

    def test_unknown_product_is_noop(self):
        cart = _cart_with()
        assert cart.set_quantity("nope", 2) == Success(None)
        assert cart.lines[0].quantity == 1


class TestRemoveAndSubtotal:

    def test_remove_line(self):
        cart = _cart_with()
        cart.remove_line("p-1")
        assert cart.is_empty()

    def test_remove_missing_is_noop(self):
        cart = _cart_with()
        cart.remove_line("nope")
        assert len(cart.lines) == 1

    def test_subtotal(self):
        cart = _cart_with(qty_ceiling=5, price="10.00")
        cart.add_line("inv-2", "p-2", "Gadget", Money.of("2.49"), 5)
        cart.set_quantity("p-1", 3)
        cart.set_quantity("p-2", 2)
        assert cart.subtotal() == Money.of("34.98")

    def test_empty_subtotal_is_zero(self):
        assert Cart().subtotal() == Money.zero()


class TestCouponSlot:

    def _applied(self, cart: Cart) -> AppliedCoupon:
        coupon = Coupon("c-1", "TENOFF", DiscountType.PERCENTAGE, Decimal("10"))
        return AppliedCoupon.of(coupon, cart.subtotal())

    def test_second_coupon_requires_removal(self):
        cart = _cart_with()
        assert isinstance(cart.apply_coupon(self._applied(cart)), Success)
        result = cart.apply_coupon(self._applied(cart))
        assert isinstance(result.failure(), CouponAlreadyApplied)

        cart.remove_coupon()
        assert isinstance(cart.apply_coupon(self._applied(cart)), Success)

    def test_discount_follows_quantity_changes(self):
        cart = _cart_with(qty_ceiling=5)
        cart.apply_coupon(self._applied(cart))
        assert cart.discount() == Money.of("1.00")

        cart.set_quantity("p-1", 3)
        assert cart.discount() == Money.of("3.00")
        assert cart.total() == Money.of("27.00")

    def test_remove_coupon_restores_full_total(self):
        cart = _cart_with()
        cart.apply_coupon(self._applied(cart))
        cart.remove_coupon()
        assert cart.total() == cart.subtotal()


def _random_ops(seed: int):
    rng = random.Random(seed)
    for _ in range(rng.randint(0, 40)):
        op = rng.choice(["add", "set", "remove"])
        if op == "add":
            yield op, rng.choice("abc"), rng.randint(1, 6)
        elif op == "set":
            yield op, rng.choice("abcx"), rng.randint(-3, 20)
        else:
            yield op, rng.choice("abc"), 0


@pytest.mark.parametrize("seed", range(25))
def test_quantity_always_within_bounds(seed):
    cart = Cart()
    for op, pid, n in _random_ops(seed):
        if op == "add":
            cart.add_line(f"inv-{pid}", pid, pid.upper(), Money.of("1.00"), n)
        elif op == "set":
            cart.set_quantity(pid, n)
        else:
            cart.remove_line(pid)

        for ln in cart.lines:
            assert 1 <= ln.quantity <= ln.max_quantity
        assert len({ln.product_id for ln in cart.lines}) == len(cart.lines)
