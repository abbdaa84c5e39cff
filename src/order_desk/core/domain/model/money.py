from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")
DEFAULT_CURRENCY = "USD"


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, order=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money(quantize(Decimal(str(amount))), currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money.of(0, currency)

    @staticmethod
    def from_cents(cents: int, currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money.of(Decimal(cents) / 100, currency)

    @property
    def cents(self) -> int:
        return int(self.amount * 100)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(quantize(self.amount * Decimal(n)), self.currency)

    def percent(self, rate: Decimal) -> "Money":
        return Money(quantize(self.amount * rate / Decimal(100)), self.currency)

    def clamp(self, low: "Money", high: "Money") -> "Money":
        """Bound this amount into ``[low, high]``."""
        self._assert_same_currency(low)
        self._assert_same_currency(high)
        if self.amount < low.amount:
            return low
        if self.amount > high.amount:
            return high
        return self

    def is_negative(self) -> bool:
        return self.amount < 0

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


def fold_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total
