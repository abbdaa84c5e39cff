from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.order import Order


@dataclass(frozen=True)
class ListOrdersQuery:
    store_id: str
    status: str | None = None  # "delivered" also matches completed orders
    search: str | None = None  # order number or customer name


class ListOrdersUseCase(Protocol):
    def list_orders(
        self, query: ListOrdersQuery
    ) -> Result[Sequence[Order], OrderDeskError]: ...
