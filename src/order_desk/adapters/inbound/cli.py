from __future__ import annotations

import json
import logging
import sys
from decimal import Decimal
from typing import Any

from returns.result import Result, Success

from order_desk.bootstrap import build_usecases
from order_desk.config import Settings
from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.errors import InsufficientStock, OrderDeskError
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.model.order import (
    Customer,
    Delivery,
    DeliveryAddress,
    FulfillmentDetails,
    Order,
    Pickup,
)
from order_desk.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
)


def run_cli(usecase: CreateOrderUseCase, raw: str, store_id: str, currency: str) -> int:
    """
    raw: JSON string.
    Example:
      {"customer": {"name": "Jane"},
       "fulfillment": {"type": "pickup", "person_name": "Jim"},
       "coupon_code": "WELCOME10",
       "lines": [{"inventory_id": "inv-1", "product_id": "prod-1",
                  "name": "House Red 750ml", "unit_price": "12.50",
                  "quantity": 2, "max_quantity": 10}]}
    """
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise TypeError("payload must be a JSON object")
        cart = _parse_cart(payload, currency)
        cmd = _parse_command(payload, store_id, cart)
    except (ValueError, KeyError, TypeError, ArithmeticError) as e:
        print(f"invalid_input: {e}")
        return 2

    result: Result[Order, OrderDeskError] = usecase.create_order(cmd)

    if isinstance(result, Success):
        order = result.unwrap()
        print(
            "[ok]",
            {
                "order_id": str(order.order_id),
                "order_number": order.order_number,
                "status": order.status.value,
                "subtotal": str(order.subtotal().amount),
                "discount": str(order.discount_amount.amount),
                "total": str(order.total().amount),
                "currency": order.currency,
            },
        )
        return 0

    err = result.failure()
    print("[ng]", str(err))
    if isinstance(err, InsufficientStock):
        for s in err.shortages:
            print("  -", s.describe())
    return 1


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    if key not in payload:
        return {}
    value = payload[key]
    if not isinstance(value, dict):
        raise TypeError(f"{key} must be an object")
    return value


def _parse_cart(payload: dict[str, Any], currency: str) -> Cart:
    lines = payload.get("lines") or []
    if not isinstance(lines, list):
        raise TypeError("lines must be a list")

    cart = Cart(currency=currency)
    seen: set[str] = set()
    for i, x in enumerate(lines):
        if not isinstance(x, dict):
            raise TypeError(f"lines[{i}] must be an object")
        pid = str(x["product_id"])
        if pid in seen:
            raise ValueError(f"lines[{i}]: product {pid} is listed twice")
        seen.add(pid)

        qty = int(x["quantity"])
        max_qty = int(x.get("max_quantity", qty))
        if qty > max_qty:
            raise ValueError(f"lines[{i}]: quantity {qty} exceeds max_quantity {max_qty}")

        added = cart.add_line(
            inventory_id=str(x["inventory_id"]),
            product_id=pid,
            name=str(x.get("name", pid)),
            unit_price=Money.of(Decimal(str(x["unit_price"])), currency),
            max_quantity=max_qty,
        ).bind(lambda _, pid=pid, q=qty: cart.set_quantity(pid, q))
        if not isinstance(added, Success):
            raise ValueError(str(added.failure()))
    return cart


def _parse_fulfillment(raw: dict[str, Any]) -> FulfillmentDetails:
    if raw.get("type", "pickup") == "delivery":
        addr = _section(raw, "address")
        return Delivery(
            DeliveryAddress(
                street=str(addr.get("street", "")),
                city=str(addr.get("city", "")),
                state=str(addr.get("state", "")),
                zip_code=str(addr.get("zip_code", "")),
                phone=addr.get("phone"),
                notes=addr.get("notes"),
            )
        )
    return Pickup(person_name=raw.get("person_name"))


def _parse_command(payload: dict[str, Any], store_id: str, cart: Cart) -> CreateOrderCommand:
    customer = _section(payload, "customer")
    return CreateOrderCommand(
        store_id=str(payload.get("store_id", store_id)),
        cart=cart,
        customer=Customer(
            name=str(customer.get("name", "")),
            email=customer.get("email"),
            phone=customer.get("phone"),
        ),
        fulfillment=_parse_fulfillment(_section(payload, "fulfillment")),
        coupon_code=payload.get("coupon_code"),
        notes=payload.get("notes"),
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print("usage: order-desk '<json>'")
        return 2

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    usecases = build_usecases(settings)
    return run_cli(
        usecases.create_order, argv[0], settings.default_store_id, settings.currency
    )


if __name__ == "__main__":
    raise SystemExit(main())
