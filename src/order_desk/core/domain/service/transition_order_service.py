from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.errors import (
    IllegalTransition,
    OrderDeskError,
    ValidationFailed,
)
from order_desk.core.domain.model.order import Order, OrderId
from order_desk.core.domain.model.status import OrderStatus
from order_desk.core.domain.service.notify import notify_quietly
from order_desk.core.ports.inbound.transition_order import (
    TransitionOrderCommand,
    TransitionOrderUseCase,
)
from order_desk.core.ports.outbound.events import (
    STATUS_CHANGED,
    OrderChanged,
    OrderNotifier,
)
from order_desk.core.ports.outbound.orders import OrderStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionOrderDeps:
    orders: OrderStore
    notifier: OrderNotifier


@dataclass(frozen=True)
class TransitionOrderService(TransitionOrderUseCase):
    deps: TransitionOrderDeps

    def transition_order(
        self, command: TransitionOrderCommand
    ) -> Result[Order, OrderDeskError]:
        try:
            oid = OrderId.parse(command.order_id)
        except ValueError:
            return Failure(
                ValidationFailed("order_id must be a valid UUID", field_name="order_id")
            )
        try:
            target = OrderStatus(command.target_status)
        except ValueError:
            return Failure(
                IllegalTransition(
                    message=f"unknown status {command.target_status!r}",
                    target=command.target_status,
                )
            )

        result = self.deps.orders.get(oid).bind(
            lambda order: self._apply(order, target)
        )
        if isinstance(result, Success):
            moved = result.unwrap()
            notify_quietly(self.deps.notifier, OrderChanged.of(moved, STATUS_CHANGED))
        return result

    def _apply(self, order: Order, target: OrderStatus) -> Result[Order, OrderDeskError]:
        previous = order.status
        moved = order.transition(target)
        if isinstance(moved, Failure):
            logger.info("order %s: %s", order.order_number, moved.failure())
            return moved

        saved = self.deps.orders.update_status(moved.unwrap(), expected=previous)
        if isinstance(saved, Success):
            logger.info(
                "order %s moved %s -> %s",
                order.order_number,
                previous.value,
                target.value,
            )
        return saved
