from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result

from order_desk.core.domain.model.errors import OrderDeskError, ValidationFailed
from order_desk.core.domain.model.inventory import InventoryLine
from order_desk.core.ports.inbound.sellable_inventory import (
    SellableInventoryQuery,
    SellableInventoryUseCase,
)
from order_desk.core.ports.outbound.inventory import InventoryReader


@dataclass(frozen=True)
class SellableInventoryDeps:
    inventory: InventoryReader


@dataclass(frozen=True)
class SellableInventoryService(SellableInventoryUseCase):
    deps: SellableInventoryDeps

    def sellable_inventory(
        self, query: SellableInventoryQuery
    ) -> Result[Sequence[InventoryLine], OrderDeskError]:
        if not query.store_id.strip():
            return Failure(ValidationFailed("store_id is required", field_name="store_id"))

        needle = (query.search or "").strip().lower()
        return self.deps.inventory.sellable(query.store_id).map(
            lambda lines: _pick(lines, needle)
        )


def _pick(lines: Sequence[InventoryLine], needle: str) -> Sequence[InventoryLine]:
    picked = [
        ln
        for ln in lines
        if ln.available_quantity > 0 and (not needle or needle in ln.name.lower())
    ]
    return tuple(sorted(picked, key=lambda ln: ln.name.lower()))
