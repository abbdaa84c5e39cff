from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from order_desk.core.domain.model.inventory import StockShortage


@dataclass(frozen=True)
class OrderDeskError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class ValidationFailed(OrderDeskError):
    field_name: str | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.field_name is None:
            return f"validation_failed: {self.message}"
        return f"validation_failed: {self.field_name} ({self.message})"


@dataclass(frozen=True)
class InsufficientStock(OrderDeskError):
    shortages: Tuple[StockShortage, ...] = field(default_factory=tuple)

    def __str__(self) -> str:  # pragma: no cover
        parts = ", ".join(s.describe() for s in self.shortages)
        return f"insufficient_stock: {parts} ({self.message})"


@dataclass(frozen=True)
class CouponNotFound(OrderDeskError):
    code: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"coupon_not_found: {self.code} ({self.message})"


@dataclass(frozen=True)
class CouponInactive(CouponNotFound):
    def __str__(self) -> str:  # pragma: no cover
        return f"coupon_inactive: {self.code} ({self.message})"


@dataclass(frozen=True)
class CouponAlreadyApplied(ValidationFailed):
    pass


@dataclass(frozen=True)
class IllegalTransition(OrderDeskError):
    current: str = ""
    target: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"illegal_transition: {self.current} -> {self.target} ({self.message})"


@dataclass(frozen=True)
class PersistenceFailure(OrderDeskError):
    pass


@dataclass(frozen=True)
class OrderNotFound(PersistenceFailure):
    order_id: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"order_not_found: {self.order_id} ({self.message})"


@dataclass(frozen=True)
class OrderNumberTaken(PersistenceFailure):
    order_number: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"order_number_taken: {self.order_number} ({self.message})"


@dataclass(frozen=True)
class NotifyError(OrderDeskError):
    pass
