from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.inventory import InventoryLine


@dataclass(frozen=True)
class SellableInventoryQuery:
    store_id: str
    search: str | None = None


class SellableInventoryUseCase(Protocol):
    def sellable_inventory(
        self, query: SellableInventoryQuery
    ) -> Result[Sequence[InventoryLine], OrderDeskError]: ...
