from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_desk.core.domain.model.errors import OrderDeskError
from order_desk.core.domain.model.order import Order


@dataclass(frozen=True)
class TransitionOrderCommand:
    order_id: str  # UUID string
    target_status: str


class TransitionOrderUseCase(Protocol):
    def transition_order(
        self, command: TransitionOrderCommand
    ) -> Result[Order, OrderDeskError]: ...
