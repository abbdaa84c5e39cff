from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from returns.result import Failure, Result, Success
from sqlalchemy import Engine, create_engine, func, insert, or_, select, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from order_desk.adapters.outbound.sql_schema import (
    coupons,
    inventory,
    metadata,
    order_items,
    orders,
)
from order_desk.core.domain.model.coupon import Coupon, DiscountType, normalize_code
from order_desk.core.domain.model.errors import (
    InsufficientStock,
    OrderDeskError,
    OrderNotFound,
    OrderNumberTaken,
    PersistenceFailure,
)
from order_desk.core.domain.model.inventory import (
    InventoryLine,
    StockDecrement,
    StockShortage,
)
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.model.order import (
    Customer,
    Delivery,
    DeliveryAddress,
    Order,
    OrderId,
    OrderItem,
    Pickup,
)
from order_desk.core.domain.model.status import FulfillmentType, OrderStatus
from order_desk.core.ports.outbound.coupons import CouponRegistry
from order_desk.core.ports.outbound.inventory import InventoryReader
from order_desk.core.ports.outbound.orders import OrderFilter, OrderStore

logger = logging.getLogger(__name__)


def create_sql_engine(url: str, timeout_seconds: float = 5.0) -> Engine:
    """Engine with lock and pool waits bounded by ``timeout_seconds``; creates missing tables."""
    engine = create_engine(url, **engine_options(url, timeout_seconds))
    metadata.create_all(engine)
    return engine


def engine_options(url: str, timeout_seconds: float) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # busy timeout on the file lock; sqlite pools take no checkout timeout
        return {"connect_args": {"timeout": timeout_seconds, "check_same_thread": False}}
    return {"pool_timeout": timeout_seconds, "pool_pre_ping": True}


@dataclass
class SqlStore(InventoryReader, OrderStore):
    engine: Engine

    def put_inventory(self, *lines: InventoryLine) -> None:
        with self.engine.begin() as conn:
            for ln in lines:
                conn.execute(inventory.delete().where(inventory.c.id == ln.inventory_id))
                conn.execute(
                    insert(inventory).values(
                        id=ln.inventory_id,
                        store_id=ln.store_id,
                        product_id=ln.product_id,
                        name=ln.name,
                        currency=ln.unit_price.currency,
                        unit_price_cents=ln.unit_price.cents,
                        quantity=ln.available_quantity,
                    )
                )

    def available(self, inventory_id: str) -> int:
        with self.engine.connect() as conn:
            qty = conn.execute(
                select(inventory.c.quantity).where(inventory.c.id == inventory_id)
            ).scalar_one_or_none()
        return qty or 0

    # ---- InventoryReader ---------------------------------------------------

    def sellable(self, store_id: str) -> Result[Sequence[InventoryLine], OrderDeskError]:
        stmt = (
            select(inventory)
            .where(inventory.c.store_id == store_id, inventory.c.quantity > 0)
            .order_by(inventory.c.name)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            return _persistence_failure("inventory read failed", e)
        return Success(tuple(_row_to_inventory(r) for r in rows))

    # ---- OrderStore --------------------------------------------------------

    def commit(
        self, order: Order, decrements: Sequence[StockDecrement]
    ) -> Result[Order, OrderDeskError]:
        requested: Dict[str, int] = {}
        for d in decrements:
            requested[d.inventory_id] = requested.get(d.inventory_id, 0) + d.quantity

        try:
            with self.engine.connect() as conn:
                with conn.begin() as tx:
                    shortages = []
                    for d in decrements:
                        if d.inventory_id not in requested:
                            continue  # already decremented via an earlier line
                        qty = requested.pop(d.inventory_id)
                        res = conn.execute(
                            update(inventory)
                            .where(
                                inventory.c.id == d.inventory_id,
                                inventory.c.store_id == order.store_id,
                                inventory.c.quantity >= qty,
                            )
                            .values(quantity=inventory.c.quantity - qty)
                        )
                        if res.rowcount != 1:
                            shortages.append(
                                StockShortage(
                                    inventory_id=d.inventory_id,
                                    product_id=d.product_id,
                                    name=d.name,
                                    requested=qty,
                                    available=_current_quantity(
                                        conn, d.inventory_id, order.store_id
                                    ),
                                )
                            )

                    if shortages:
                        tx.rollback()
                        return Failure(
                            InsufficientStock(
                                message="stock changed since the cart was built",
                                shortages=tuple(shortages),
                            )
                        )

                    conn.execute(insert(orders).values(**_order_to_row(order)))
                    conn.execute(
                        insert(order_items),
                        [
                            _item_to_row(order, pos, it)
                            for pos, it in enumerate(order.items)
                        ],
                    )
        except IntegrityError as e:
            if "order_number" in str(e.orig):
                return Failure(
                    OrderNumberTaken(
                        message="order_number already exists",
                        order_number=order.order_number,
                    )
                )
            return _persistence_failure("order insert failed", e)
        except SQLAlchemyError as e:
            return _persistence_failure("order commit failed", e)

        return Success(order)

    def get(self, order_id: OrderId) -> Result[Order, OrderDeskError]:
        key = str(order_id)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(orders).where(orders.c.id == key)).first()
                if row is None:
                    return Failure(OrderNotFound(message="order not found", order_id=key))
                items = _load_items(conn, [key])
        except SQLAlchemyError as e:
            return _persistence_failure("order read failed", e)
        return Success(_row_to_order(row, items.get(key, [])))

    def list(
        self, store_id: str, order_filter: OrderFilter | None = None
    ) -> Result[Sequence[Order], OrderDeskError]:
        flt = order_filter or OrderFilter()
        stmt = select(orders).where(orders.c.store_id == store_id)
        if flt.statuses is not None:
            stmt = stmt.where(orders.c.status.in_(sorted(s.value for s in flt.statuses)))
        if flt.search:
            needle = flt.search.lower()
            stmt = stmt.where(
                or_(
                    func.lower(orders.c.order_number).contains(needle, autoescape=True),
                    func.lower(orders.c.guest_name).contains(needle, autoescape=True),
                )
            )
        stmt = stmt.order_by(orders.c.created_at.desc())

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
                items = _load_items(conn, [r.id for r in rows])
        except SQLAlchemyError as e:
            return _persistence_failure("order list failed", e)
        return Success(tuple(_row_to_order(r, items.get(r.id, [])) for r in rows))

    def update_status(
        self, order: Order, expected: OrderStatus
    ) -> Result[Order, OrderDeskError]:
        key = str(order.order_id)
        try:
            with self.engine.begin() as conn:
                res = conn.execute(
                    update(orders)
                    .where(orders.c.id == key, orders.c.status == expected.value)
                    .values(
                        status=order.status.value,
                        updated_at=order.updated_at,
                        confirmed_at=order.confirmed_at,
                        completed_at=order.completed_at,
                        cancelled_at=order.cancelled_at,
                    )
                )
                if res.rowcount == 1:
                    return Success(order)
                exists = conn.execute(
                    select(orders.c.id).where(orders.c.id == key)
                ).first()
        except SQLAlchemyError as e:
            return _persistence_failure("status update failed", e)

        if exists is None:
            return Failure(OrderNotFound(message="order not found", order_id=key))
        return Failure(
            PersistenceFailure(
                message=f"order {order.order_number} changed concurrently; reload and retry"
            )
        )


@dataclass
class SqlCouponRegistry(CouponRegistry):
    engine: Engine

    def put(self, *items: Coupon) -> None:
        with self.engine.begin() as conn:
            for c in items:
                conn.execute(coupons.delete().where(coupons.c.id == c.coupon_id))
                conn.execute(
                    insert(coupons).values(
                        id=c.coupon_id,
                        code=normalize_code(c.code),
                        type=c.discount_type.value,
                        value=str(c.discount_value),
                        is_active=c.is_active,
                    )
                )

    def lookup(self, code: str) -> Result[Coupon | None, OrderDeskError]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(coupons).where(coupons.c.code == normalize_code(code))
                ).first()
        except SQLAlchemyError as e:
            return _persistence_failure("coupon lookup failed", e)
        if row is None:
            return Success(None)
        return Success(
            Coupon(
                coupon_id=row.id,
                code=row.code,
                discount_type=DiscountType(row.type),
                discount_value=Decimal(row.value),
                is_active=bool(row.is_active),
            )
        )


# ---- row mapping -----------------------------------------------------------


def _persistence_failure(what: str, exc: Exception) -> Failure[OrderDeskError]:
    logger.error("%s: %s", what, exc)
    return Failure(PersistenceFailure(message=f"{what}: {type(exc).__name__}"))


def _current_quantity(conn: Connection, inventory_id: str, store_id: str) -> int:
    qty = conn.execute(
        select(inventory.c.quantity).where(
            inventory.c.id == inventory_id, inventory.c.store_id == store_id
        )
    ).scalar_one_or_none()
    return qty or 0


def _load_items(conn: Connection, order_ids: List[str]) -> Dict[str, List[OrderItem]]:
    out: Dict[str, List[OrderItem]] = {}
    if not order_ids:
        return out
    currencies = dict(
        conn.execute(
            select(orders.c.id, orders.c.currency).where(orders.c.id.in_(order_ids))
        ).all()
    )
    rows = conn.execute(
        select(order_items)
        .where(order_items.c.order_id.in_(order_ids))
        .order_by(order_items.c.order_id, order_items.c.position)
    ).all()
    for r in rows:
        out.setdefault(r.order_id, []).append(
            OrderItem(
                inventory_id=r.inventory_id,
                product_id=r.product_id,
                name=r.product_name,
                quantity=r.quantity,
                unit_price=Money.from_cents(r.unit_price_cents, currencies[r.order_id]),
            )
        )
    return out


def _row_to_inventory(r: Row) -> InventoryLine:
    return InventoryLine(
        inventory_id=r.id,
        store_id=r.store_id,
        product_id=r.product_id,
        name=r.name,
        unit_price=Money.from_cents(r.unit_price_cents, r.currency),
        available_quantity=r.quantity,
    )


def _order_to_row(order: Order) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "id": str(order.order_id),
        "order_number": order.order_number,
        "store_id": order.store_id,
        "status": order.status.value,
        "guest_name": order.customer.name,
        "guest_email": order.customer.email,
        "guest_phone": order.customer.phone,
        "fulfillment_type": order.fulfillment_type.value,
        "pickup_person_name": None,
        "currency": order.currency,
        "subtotal_cents": order.subtotal().cents,
        "discount_cents": order.discount_amount.cents,
        "total_cents": order.total().cents,
        "coupon_id": order.coupon_id,
        "coupon_code": order.coupon_code,
        "customer_notes": order.notes,
        "order_source": order.order_source,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "confirmed_at": order.confirmed_at,
        "completed_at": order.completed_at,
        "cancelled_at": order.cancelled_at,
    }
    if isinstance(order.fulfillment, Delivery):
        addr = order.fulfillment.address
        row.update(
            delivery_street=addr.street,
            delivery_city=addr.city,
            delivery_state=addr.state,
            delivery_zip_code=addr.zip_code,
            delivery_phone=addr.phone,
            delivery_notes=addr.notes,
        )
    else:
        row["pickup_person_name"] = order.fulfillment.person_name
    return row


def _item_to_row(order: Order, position: int, item: OrderItem) -> Dict[str, Any]:
    return {
        "order_id": str(order.order_id),
        "position": position,
        "inventory_id": item.inventory_id,
        "product_id": item.product_id,
        "product_name": item.name,
        "quantity": item.quantity,
        "unit_price_cents": item.unit_price.cents,
        "subtotal_cents": item.line_subtotal().cents,
    }


def _row_to_order(r: Row, items: List[OrderItem]) -> Order:
    if r.fulfillment_type == FulfillmentType.DELIVERY.value:
        fulfillment: Delivery | Pickup = Delivery(
            DeliveryAddress(
                street=r.delivery_street or "",
                city=r.delivery_city or "",
                state=r.delivery_state or "",
                zip_code=r.delivery_zip_code or "",
                phone=r.delivery_phone,
                notes=r.delivery_notes,
            )
        )
    else:
        fulfillment = Pickup(person_name=r.pickup_person_name)

    return Order(
        order_id=OrderId.parse(r.id),
        order_number=r.order_number,
        store_id=r.store_id,
        customer=Customer(name=r.guest_name, email=r.guest_email, phone=r.guest_phone),
        items=tuple(items),
        discount_amount=Money.from_cents(r.discount_cents, r.currency),
        fulfillment=fulfillment,
        status=OrderStatus(r.status),
        created_at=_aware(r.created_at),
        coupon_id=r.coupon_id,
        coupon_code=r.coupon_code,
        notes=r.customer_notes,
        updated_at=_aware(r.updated_at),
        confirmed_at=_aware(r.confirmed_at),
        completed_at=_aware(r.completed_at),
        cancelled_at=_aware(r.cancelled_at),
    )


def _aware(ts: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if ts is None or ts.tzinfo is not None:
        return ts
    return ts.replace(tzinfo=timezone.utc)
