from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.order import Order


@dataclass(frozen=True)
class GetOrderQuery:
    order_id: str  # UUID string


class GetOrderUseCase(Protocol):
    def get_order(self, query: GetOrderQuery) -> Result[Order, OrderDeskError]: ...
