"""Unit tests for the Money value object."""

from decimal import Decimal

import pytest

from order_desk.core.domain.model.money import Money, fold_money


class TestMoney:

    def test_of_rounds_half_up(self):
        assert Money.of("2.345").amount == Decimal("2.35")
        assert Money.of("2.344").amount == Decimal("2.34")

    def test_multiplication_keeps_cents(self):
        assert Money.of("0.10") * 3 == Money.of("0.30")

    def test_percent(self):
        assert Money.of("30.00").percent(Decimal("10")) == Money.of("3.00")
        assert Money.of("9.99").percent(Decimal("15")) == Money.of("1.50")

    def test_clamp(self):
        low, high = Money.zero(), Money.of("10.00")
        assert Money.of("50.00").clamp(low, high) == high
        assert Money.of("-1.00").clamp(low, high) == low
        assert Money.of("4.00").clamp(low, high) == Money.of("4.00")

    def test_cents_round_trip(self):
        assert Money.of("12.34").cents == 1234
        assert Money.from_cents(1234) == Money.of("12.34")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValueError, match="currency_mismatch"):
            Money.of("1.00", "USD") + Money.of("1.00", "EUR")

    def test_fold(self):
        total = fold_money([Money.of("1.10"), Money.of("2.20"), Money.of("3.30")])
        assert total == Money.of("6.60")
