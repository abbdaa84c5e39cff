from __future__ import annotations

from dataclasses import dataclass

from order_desk.core.domain.model.money import Money


@dataclass(frozen=True)
class InventoryLine:
    """A per-store, per-product stock record as seen by the product picker."""

    inventory_id: str
    store_id: str
    product_id: str
    name: str
    unit_price: Money
    available_quantity: int


@dataclass(frozen=True)
class StockDecrement:
    inventory_id: str
    product_id: str
    name: str
    quantity: int


@dataclass(frozen=True)
class StockShortage:
    inventory_id: str
    product_id: str
    name: str
    requested: int
    available: int

    @property
    def missing(self) -> int:
        return self.requested - self.available

    def describe(self) -> str:
        return f"{self.missing} units of {self.name} no longer available"
