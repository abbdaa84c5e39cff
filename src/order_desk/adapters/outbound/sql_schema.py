"""Tables of the order desk. Money columns hold integer cents."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

inventory = Table(
    "store_inventories",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("store_id", String(64), nullable=False, index=True),
    Column("product_id", String(64), nullable=False),
    Column("name", String(255), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("unit_price_cents", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    UniqueConstraint("store_id", "product_id", name="uq_inventory_store_product"),
)

coupons = Table(
    "coupons",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("code", String(64), nullable=False, unique=True),
    Column("type", String(16), nullable=False),
    Column("value", String(32), nullable=False),  # decimal text
    Column("is_active", Boolean, nullable=False, default=True),
)

orders = Table(
    "orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_number", String(32), nullable=False),
    Column("store_id", String(64), nullable=False, index=True),
    Column("status", String(32), nullable=False),
    Column("guest_name", String(255), nullable=False),
    Column("guest_email", String(255)),
    Column("guest_phone", String(64)),
    Column("fulfillment_type", String(16), nullable=False),
    Column("delivery_street", String(255)),
    Column("delivery_city", String(128)),
    Column("delivery_state", String(64)),
    Column("delivery_zip_code", String(32)),
    Column("delivery_phone", String(64)),
    Column("delivery_notes", Text),
    Column("pickup_person_name", String(255)),
    Column("currency", String(3), nullable=False),
    Column("subtotal_cents", Integer, nullable=False),
    Column("discount_cents", Integer, nullable=False),
    Column("total_cents", Integer, nullable=False),
    Column("coupon_id", String(64)),
    Column("coupon_code", String(64)),
    Column("customer_notes", Text),
    Column("order_source", String(16), nullable=False),
    Column("payment_method", String(16), nullable=False),
    Column("payment_status", String(16), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    Column("confirmed_at", DateTime(timezone=True)),
    Column("completed_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    UniqueConstraint("order_number", name="uq_orders_order_number"),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String(36), ForeignKey("orders.id"), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("inventory_id", String(64), nullable=False),
    Column("product_id", String(64), nullable=False),
    Column("product_name", String(255), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price_cents", Integer, nullable=False),
    Column("subtotal_cents", Integer, nullable=False),
)
