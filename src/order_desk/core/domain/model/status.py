"""Order lifecycle state machine.

Forward moves follow the fulfillment pipeline
``pending -> confirmed -> processing -> ready_for_pickup -> out_for_delivery
-> delivered``. Pickup orders finish at ``completed`` straight from
``ready_for_pickup``; delivery orders marked done from the road may also land
on ``completed``. Any non-terminal order can be cancelled. ``refunded`` is a
post-fulfillment correction reachable only from ``delivered`` or
``completed``; nothing leaves ``cancelled`` or ``refunded``.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Mapping, Tuple


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class FulfillmentType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


S = OrderStatus

TERMINAL: FrozenSet[OrderStatus] = frozenset(
    {S.DELIVERED, S.COMPLETED, S.CANCELLED, S.REFUNDED}
)

# cancellation is added on top of this table for every non-terminal state
FORWARD: Mapping[OrderStatus, FrozenSet[OrderStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED}),
    S.CONFIRMED: frozenset({S.PROCESSING}),
    S.PROCESSING: frozenset({S.READY_FOR_PICKUP}),
    S.READY_FOR_PICKUP: frozenset({S.OUT_FOR_DELIVERY, S.DELIVERED, S.COMPLETED}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.COMPLETED}),
    S.DELIVERED: frozenset({S.REFUNDED}),
    S.COMPLETED: frozenset({S.REFUNDED}),
    S.CANCELLED: frozenset(),
    S.REFUNDED: frozenset(),
}


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL


def successors(status: OrderStatus) -> FrozenSet[OrderStatus]:
    if is_terminal(status):
        return FORWARD[status]
    return FORWARD[status] | {S.CANCELLED}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in successors(current)


def next_statuses(
    status: OrderStatus, fulfillment: FulfillmentType
) -> Tuple[OrderStatus, ...]:
    """Staff actions offered on an order card, primary action first."""
    if status is S.PENDING:
        return (S.CONFIRMED, S.CANCELLED)
    if status is S.CONFIRMED:
        return (S.PROCESSING, S.CANCELLED)
    if status is S.PROCESSING:
        return (S.READY_FOR_PICKUP, S.CANCELLED)
    if status is S.READY_FOR_PICKUP:
        if fulfillment is FulfillmentType.DELIVERY:
            return (S.OUT_FOR_DELIVERY, S.CANCELLED)
        return (S.COMPLETED, S.CANCELLED)
    if status is S.OUT_FOR_DELIVERY:
        return (S.DELIVERED, S.CANCELLED)
    return ()
