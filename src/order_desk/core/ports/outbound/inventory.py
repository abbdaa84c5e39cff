from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.inventory import InventoryLine


class InventoryReader(Protocol):
    def sellable(
        self, store_id: str
    ) -> Result[Sequence[InventoryLine], OrderDeskError]:
        """Lines of ``store_id`` with stock left. May be stale by the time an order commits."""
        ...
