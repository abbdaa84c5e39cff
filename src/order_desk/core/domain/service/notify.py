from __future__ import annotations

import logging

from returns.result import Failure

from order_desk.core.ports.outbound.events import OrderChanged, OrderNotifier

logger = logging.getLogger(__name__)


def notify_quietly(notifier: OrderNotifier, event: OrderChanged) -> None:
    """Fire-and-forget: a committed order never depends on the realtime layer."""
    try:
        result = notifier.notify(event)
    except Exception:  # noqa: BLE001
        logger.exception(
            "notifier raised for %s on order %s", event.event, event.order_number
        )
        return

    if isinstance(result, Failure):
        logger.warning(
            "notification %s for order %s dropped: %s",
            event.event,
            event.order_number,
            result.failure(),
        )
