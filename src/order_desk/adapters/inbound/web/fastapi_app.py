from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Failure, Result, Success

from order_desk.bootstrap import UseCases
from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.errors import (
    CouponNotFound,
    IllegalTransition,
    InsufficientStock,
    OrderDeskError,
    OrderNotFound,
    PersistenceFailure,
    ValidationFailed,
)
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.model.order import (
    Customer,
    Delivery,
    DeliveryAddress,
    FulfillmentDetails,
    Order,
    Pickup,
)
from order_desk.core.domain.model.status import next_statuses
from order_desk.core.ports.inbound.apply_coupon import ApplyCouponQuery
from order_desk.core.ports.inbound.create_order import CreateOrderCommand
from order_desk.core.ports.inbound.get_order import GetOrderQuery
from order_desk.core.ports.inbound.list_orders import ListOrdersQuery
from order_desk.core.ports.inbound.sellable_inventory import SellableInventoryQuery
from order_desk.core.ports.inbound.transition_order import TransitionOrderCommand

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class CartLineIn(BaseModel):
    inventory_id: str = Field(min_length=1, examples=["inv-1"])
    product_id: str = Field(min_length=1, examples=["prod-1"])
    name: str = Field(min_length=1, examples=["House Red 750ml"])
    unit_price: Decimal = Field(ge=0, examples=["12.50"])
    quantity: int = Field(gt=0, examples=[2])
    max_quantity: int | None = Field(None, gt=0, examples=[10])


class CustomerIn(BaseModel):
    name: str = Field(examples=["Jane Doe"])
    email: str | None = None
    phone: str | None = None


class PickupIn(BaseModel):
    type: Literal["pickup"] = "pickup"
    person_name: str | None = None


class DeliveryAddressIn(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str | None = None
    notes: str | None = None


class DeliveryIn(BaseModel):
    type: Literal["delivery"]
    address: DeliveryAddressIn


class CreateOrderRequest(BaseModel):
    lines: list[CartLineIn]
    customer: CustomerIn
    fulfillment: Annotated[
        Union[PickupIn, DeliveryIn], Field(discriminator="type")
    ] = PickupIn()
    coupon_code: str | None = None
    notes: str | None = None


class TransitionRequest(BaseModel):
    target_status: str = Field(min_length=1, examples=["processing"])


class EvaluateCouponRequest(BaseModel):
    code: str = Field(min_length=1, examples=["WELCOME10"])
    subtotal: Decimal = Field(ge=0, examples=["30.00"])


class AppliedCouponOut(BaseModel):
    coupon_id: str
    code: str
    discount_type: str
    discount_value: str
    discount_amount: str
    total: str
    currency: str


class InventoryLineOut(BaseModel):
    inventory_id: str
    product_id: str
    name: str
    unit_price: str
    available_quantity: int


class OrderItemOut(BaseModel):
    inventory_id: str
    product_id: str
    name: str
    quantity: int
    unit_price: str
    line_subtotal: str


class OrderOut(BaseModel):
    order_id: str
    order_number: str
    store_id: str
    status: str
    next_statuses: list[str]
    customer: CustomerIn
    fulfillment_type: str
    delivery_address: DeliveryAddressIn | None = None
    pickup_person_name: str | None = None
    items: list[OrderItemOut]
    subtotal: str
    discount_amount: str
    total: str
    currency: str
    coupon_code: str | None = None
    notes: str | None = None
    order_source: str
    payment_method: str
    payment_status: str
    created_at: str
    updated_at: str | None = None
    confirmed_at: str | None = None
    completed_at: str | None = None
    cancelled_at: str | None = None


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


def _map_error_to_http(err: OrderDeskError) -> tuple[int, ErrorResponse]:
    if isinstance(err, ValidationFailed):
        details = [{"field": err.field_name}] if err.field_name else None
        return 400, ErrorResponse(
            type=type(err).__name__, message=err.message, details=details
        )

    if isinstance(err, (OrderNotFound, CouponNotFound)):
        return 404, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, InsufficientStock):
        return 409, ErrorResponse(
            type=type(err).__name__,
            message=err.message,
            details=[
                {
                    "inventory_id": s.inventory_id,
                    "product_id": s.product_id,
                    "name": s.name,
                    "requested": s.requested,
                    "available": s.available,
                    "message": s.describe(),
                }
                for s in err.shortages
            ],
        )

    if isinstance(err, IllegalTransition):
        return 409, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, PersistenceFailure):
        return 503, ErrorResponse(type=type(err).__name__, message=str(err))

    return 500, ErrorResponse(type=type(err).__name__, message=str(err))


def _ts(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


def _to_order_out(order: Order) -> OrderOut:
    address = None
    pickup_person = None
    if isinstance(order.fulfillment, Delivery):
        a = order.fulfillment.address
        address = DeliveryAddressIn(
            street=a.street,
            city=a.city,
            state=a.state,
            zip_code=a.zip_code,
            phone=a.phone,
            notes=a.notes,
        )
    else:
        pickup_person = order.fulfillment.person_name

    return OrderOut(
        order_id=str(order.order_id),
        order_number=order.order_number,
        store_id=order.store_id,
        status=order.status.value,
        next_statuses=[
            s.value for s in next_statuses(order.status, order.fulfillment_type)
        ],
        customer=CustomerIn(
            name=order.customer.name,
            email=order.customer.email,
            phone=order.customer.phone,
        ),
        fulfillment_type=order.fulfillment_type.value,
        delivery_address=address,
        pickup_person_name=pickup_person,
        items=[
            OrderItemOut(
                inventory_id=it.inventory_id,
                product_id=it.product_id,
                name=it.name,
                quantity=it.quantity,
                unit_price=str(it.unit_price.amount),
                line_subtotal=str(it.line_subtotal().amount),
            )
            for it in order.items
        ],
        subtotal=str(order.subtotal().amount),
        discount_amount=str(order.discount_amount.amount),
        total=str(order.total().amount),
        currency=order.currency,
        coupon_code=order.coupon_code,
        notes=order.notes,
        order_source=order.order_source,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        created_at=order.created_at.isoformat(),
        updated_at=_ts(order.updated_at),
        confirmed_at=_ts(order.confirmed_at),
        completed_at=_ts(order.completed_at),
        cancelled_at=_ts(order.cancelled_at),
    )


def _check_lines(lines: list[CartLineIn]) -> Result[None, OrderDeskError]:
    seen: dict[str, int] = {}
    for i, ln in enumerate(lines):
        if ln.product_id in seen:
            return Failure(
                ValidationFailed(
                    f"product {ln.product_id} already on lines[{seen[ln.product_id]}]",
                    field_name=f"lines[{i}].product_id",
                )
            )
        seen[ln.product_id] = i
        if ln.max_quantity is not None and ln.quantity > ln.max_quantity:
            return Failure(
                ValidationFailed(
                    f"quantity {ln.quantity} exceeds max_quantity {ln.max_quantity}",
                    field_name=f"lines[{i}].quantity",
                )
            )
    return Success(None)


def _build_cart(lines: list[CartLineIn], currency: str) -> Result[Cart, OrderDeskError]:
    cart = Cart(currency=currency)
    result: Result[Any, OrderDeskError] = _check_lines(lines)
    for ln in lines:
        result = result.bind(
            lambda _, ln=ln: cart.add_line(
                inventory_id=ln.inventory_id,
                product_id=ln.product_id,
                name=ln.name,
                unit_price=Money.of(ln.unit_price, currency),
                max_quantity=ln.max_quantity or ln.quantity,
            )
        ).bind(lambda _, ln=ln: cart.set_quantity(ln.product_id, ln.quantity))
    return result.map(lambda _: cart)


def _to_fulfillment(req: CreateOrderRequest) -> FulfillmentDetails:
    f = req.fulfillment
    if isinstance(f, DeliveryIn):
        return Delivery(
            DeliveryAddress(
                street=f.address.street,
                city=f.address.city,
                state=f.address.state,
                zip_code=f.address.zip_code,
                phone=f.address.phone,
                notes=f.address.notes,
            )
        )
    return Pickup(person_name=f.person_name)


def create_app(usecases: UseCases) -> FastAPI:
    app = FastAPI(title="order_desk")
    currency = usecases.settings.currency

    # --- exception handlers ----------------------------------------------------

    @app.exception_handler(OrderDeskError)
    async def handle_domain_error(_: Request, exc: OrderDeskError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    # --- routes ----------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/stores/{store_id}/inventory", response_model=list[InventoryLineOut])
    def sellable_inventory(
        store_id: str, search: str | None = Query(None)
    ) -> Any:
        result = usecases.inventory.sellable_inventory(
            SellableInventoryQuery(store_id=store_id, search=search)
        )
        if isinstance(result, Success):
            return [
                InventoryLineOut(
                    inventory_id=ln.inventory_id,
                    product_id=ln.product_id,
                    name=ln.name,
                    unit_price=str(ln.unit_price.amount),
                    available_quantity=ln.available_quantity,
                )
                for ln in result.unwrap()
            ]
        raise result.failure()

    @app.post(
        "/coupons/evaluate",
        response_model=AppliedCouponOut,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    def evaluate_coupon(req: EvaluateCouponRequest) -> Any:
        subtotal = Money.of(req.subtotal, currency)
        result = usecases.coupons.apply(ApplyCouponQuery(req.code, subtotal))
        if isinstance(result, Success):
            applied = result.unwrap()
            return AppliedCouponOut(
                coupon_id=applied.coupon_id,
                code=applied.code,
                discount_type=applied.discount_type.value,
                discount_value=str(applied.discount_value),
                discount_amount=str(applied.discount_amount.amount),
                total=str((subtotal - applied.discount_amount).amount),
                currency=currency,
            )
        raise result.failure()

    @app.post(
        "/stores/{store_id}/orders",
        response_model=OrderOut,
        status_code=201,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
            503: {"model": ErrorResponse},
        },
    )
    def create_order(store_id: str, req: CreateOrderRequest) -> Any:
        result = _build_cart(req.lines, currency).bind(
            lambda cart: usecases.create_order.create_order(
                CreateOrderCommand(
                    store_id=store_id,
                    cart=cart,
                    customer=Customer(
                        name=req.customer.name,
                        email=req.customer.email,
                        phone=req.customer.phone,
                    ),
                    fulfillment=_to_fulfillment(req),
                    coupon_code=req.coupon_code,
                    notes=req.notes,
                )
            )
        )
        if isinstance(result, Success):
            return _to_order_out(result.unwrap())
        raise result.failure()

    @app.get(
        "/stores/{store_id}/orders",
        response_model=list[OrderOut],
        responses={400: {"model": ErrorResponse}},
    )
    def list_orders(
        store_id: str,
        status: str | None = Query(None),
        search: str | None = Query(None),
    ) -> Any:
        result = usecases.list_orders.list_orders(
            ListOrdersQuery(store_id=store_id, status=status, search=search)
        )
        if isinstance(result, Success):
            return [_to_order_out(o) for o in result.unwrap()]
        raise result.failure()

    @app.get(
        "/orders/{order_id}",
        response_model=OrderOut,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    def get_order(order_id: str) -> Any:
        result = usecases.get_order.get_order(GetOrderQuery(order_id=order_id))
        if isinstance(result, Success):
            return _to_order_out(result.unwrap())
        raise result.failure()

    @app.post(
        "/orders/{order_id}/transitions",
        response_model=OrderOut,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
    )
    def transition_order(order_id: str, req: TransitionRequest) -> Any:
        result = usecases.transition_order.transition_order(
            TransitionOrderCommand(order_id=order_id, target_status=req.target_status)
        )
        if isinstance(result, Success):
            return _to_order_out(result.unwrap())
        raise result.failure()

    return app
