from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.result import Failure, Result, Success

from order_desk.core.domain.model.errors import NotifyError, OrderDeskError
from order_desk.core.ports.outbound.events import OrderChanged, OrderNotifier

logger = logging.getLogger("order_desk.events")


@dataclass
class LoggingOrderNotifier(OrderNotifier):
    """Writes order events to the ``order_desk.events`` logger in place of a realtime channel."""

    fail: bool = False

    def notify(self, event: OrderChanged) -> Result[None, OrderDeskError]:
        if self.fail:
            return Failure(NotifyError(message="notifier is down"))
        logger.info(
            "[event] %s: order=%s number=%s store=%s status=%s",
            event.event,
            event.order_id,
            event.order_number,
            event.store_id,
            event.status.value,
        )
        return Success(None)
