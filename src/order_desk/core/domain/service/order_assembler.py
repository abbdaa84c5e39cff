from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

from returns.pipeline import flow
from returns.pointfree import bind, map_
from returns.result import Failure, Result, Success

from order_desk.core.domain.model.coupon import AppliedCoupon
from order_desk.core.domain.model.errors import (
    InsufficientStock,
    OrderDeskError,
    OrderNumberTaken,
    PersistenceFailure,
    ValidationFailed,
)
from order_desk.core.domain.model.inventory import StockDecrement
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.model.order import (
    Customer,
    Delivery,
    Order,
    OrderId,
    OrderItem,
    Pickup,
    new_order_number,
    now_utc,
)
from order_desk.core.domain.model.status import OrderStatus
from order_desk.core.domain.service.coupon_evaluator import CouponEvaluator
from order_desk.core.domain.service.notify import notify_quietly
from order_desk.core.ports.inbound.apply_coupon import ApplyCouponQuery
from order_desk.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
)
from order_desk.core.ports.outbound.events import (
    ORDER_CREATED,
    OrderChanged,
    OrderNotifier,
)
from order_desk.core.ports.outbound.orders import OrderStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderAssemblerDeps:
    orders: OrderStore
    coupons: CouponEvaluator
    notifier: OrderNotifier
    order_numbers: Callable[[], str] = new_order_number
    max_number_attempts: int = 5


@dataclass(frozen=True)
class AssemblyContext:
    command: CreateOrderCommand
    subtotal: Money
    coupon: AppliedCoupon | None = None

    @property
    def discount(self) -> Money:
        if self.coupon is None:
            return Money.zero(self.subtotal.currency)
        return self.coupon.discount_amount


@dataclass(frozen=True)
class OrderAssembler(CreateOrderUseCase):
    """
    Turns a finished cart into a committed order.

    Everything up to ``_commit`` is pure or read-only. The stock figures on the
    cart lines are only the picker snapshot; the store re-checks live stock
    inside the commit transaction and is the sole judge of availability.
    """

    deps: OrderAssemblerDeps

    def create_order(self, command: CreateOrderCommand) -> Result[Order, OrderDeskError]:
        return flow(
            command,
            _validate_command,
            bind(self._resolve_coupon),
            bind(_check_discount),
            bind(self._commit),
            map_(self._announce),
        )

    def _resolve_coupon(
        self, cmd: CreateOrderCommand
    ) -> Result[AssemblyContext, OrderDeskError]:
        subtotal = cmd.cart.subtotal()
        code = cmd.coupon_code
        if code is None and cmd.cart.coupon is not None:
            code = cmd.cart.coupon.code
        if code is None or not code.strip():
            return Success(AssemblyContext(command=cmd, subtotal=subtotal))

        # re-evaluated against the registry: the coupon may have been disabled
        # since it was applied to the cart
        return self.deps.coupons.apply(ApplyCouponQuery(code, subtotal)).map(
            lambda applied: AssemblyContext(
                command=cmd, subtotal=subtotal, coupon=applied
            )
        )

    def _commit(self, ctx: AssemblyContext) -> Result[Order, OrderDeskError]:
        decrements = tuple(
            StockDecrement(ln.inventory_id, ln.product_id, ln.name, ln.quantity)
            for ln in ctx.command.cart.lines
        )
        for attempt in range(1, self.deps.max_number_attempts + 1):
            order = _build_order(ctx, self.deps.order_numbers())
            result = self.deps.orders.commit(order, decrements)

            if isinstance(result, Success):
                return result

            err = result.failure()
            if isinstance(err, OrderNumberTaken):
                logger.warning(
                    "order number %s taken (attempt %d/%d), retrying",
                    err.order_number,
                    attempt,
                    self.deps.max_number_attempts,
                )
                continue
            if isinstance(err, InsufficientStock):
                logger.info(
                    "order for store %s rejected: %s",
                    ctx.command.store_id,
                    "; ".join(s.describe() for s in err.shortages),
                )
            return result

        return Failure(
            PersistenceFailure(
                message=f"no unique order number after {self.deps.max_number_attempts} attempts"
            )
        )

    def _announce(self, order: Order) -> Order:
        logger.info(
            "order %s created for store %s: %d items, total %s",
            order.order_number,
            order.store_id,
            len(order.items),
            order.total(),
        )
        notify_quietly(self.deps.notifier, OrderChanged.of(order, ORDER_CREATED))
        return order


# ---- pure helpers ----------------------------------------------------------


def _validate_command(
    cmd: CreateOrderCommand,
) -> Result[CreateOrderCommand, OrderDeskError]:
    if not cmd.store_id.strip():
        return Failure(ValidationFailed("store_id is required", field_name="store_id"))
    if cmd.cart.is_empty():
        return Failure(
            ValidationFailed("at least one line item is required", field_name="lines")
        )
    if not cmd.customer.name.strip():
        return Failure(
            ValidationFailed("customer name is required", field_name="customer.name")
        )

    for i, ln in enumerate(cmd.cart.lines):
        if not ln.inventory_id.strip():
            return Failure(
                ValidationFailed(
                    "inventory_id is required", field_name=f"lines[{i}].inventory_id"
                )
            )
        if ln.quantity < 1:
            return Failure(
                ValidationFailed("quantity must be >= 1", field_name=f"lines[{i}].quantity")
            )

    if isinstance(cmd.fulfillment, Delivery):
        missing = cmd.fulfillment.address.missing_fields()
        if missing:
            return Failure(
                ValidationFailed(
                    "please fill in the delivery address",
                    field_name=f"delivery_address.{missing[0]}",
                )
            )

    return Success(cmd)


def _check_discount(ctx: AssemblyContext) -> Result[AssemblyContext, OrderDeskError]:
    if ctx.discount.is_negative() or ctx.discount > ctx.subtotal:
        return Failure(
            ValidationFailed(
                "discount must be within [0, subtotal]", field_name="discount_amount"
            )
        )
    return Success(ctx)


def _build_order(ctx: AssemblyContext, order_number: str) -> Order:
    cmd = ctx.command
    items: Tuple[OrderItem, ...] = tuple(
        OrderItem(
            inventory_id=ln.inventory_id,
            product_id=ln.product_id,
            name=ln.name,
            quantity=ln.quantity,
            unit_price=ln.unit_price,
        )
        for ln in cmd.cart.lines
    )
    fulfillment = cmd.fulfillment
    if isinstance(fulfillment, Pickup) and fulfillment.person_name is not None:
        fulfillment = Pickup(person_name=fulfillment.person_name.strip() or None)

    created = now_utc()
    return Order(
        order_id=OrderId.new(),
        order_number=order_number,
        store_id=cmd.store_id,
        customer=Customer(
            name=cmd.customer.name.strip(),
            email=cmd.customer.email or None,
            phone=cmd.customer.phone or None,
        ),
        items=items,
        discount_amount=ctx.discount,
        fulfillment=fulfillment,
        status=OrderStatus.CONFIRMED,
        created_at=created,
        coupon_id=ctx.coupon.coupon_id if ctx.coupon else None,
        coupon_code=ctx.coupon.code if ctx.coupon else None,
        notes=(cmd.notes or "").strip() or None,
        updated_at=created,
        confirmed_at=created,
    )
