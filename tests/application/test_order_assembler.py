"""Integration tests for order creation against the in-memory store."""

import threading

import pytest
from returns.result import Failure, Success

from order_desk.core.domain.model.cart import Cart
from order_desk.core.domain.model.errors import (
    CouponInactive,
    CouponNotFound,
    InsufficientStock,
    PersistenceFailure,
    ValidationFailed,
)
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.model.order import Customer, Delivery, DeliveryAddress, Pickup
from order_desk.core.domain.model.status import OrderStatus
from order_desk.core.ports.outbound.events import ORDER_CREATED
from tests.fakes import (
    STORE,
    FailingNotifier,
    RaisingNotifier,
    cart_of,
    line,
    make_desk,
    numbers,
    pickup_command,
)


class TestCreateOrderHappyPath:

    def test_percentage_coupon_total(self):
        widget = line(price="10.00", qty=5)
        desk = make_desk(widget)
        result = desk.assembler.create_order(
            pickup_command(cart_of((widget, 3)), coupon_code="tenoff")
        )

        order = result.unwrap()
        assert order.subtotal() == Money.of("30.00")
        assert order.discount_amount == Money.of("3.00")
        assert order.total() == Money.of("27.00")
        assert order.coupon_code == "TENOFF"
        assert order.coupon_id == "c-10"

    def test_fixed_coupon_clamped_to_subtotal(self):
        cheap = line(price="5.00", qty=5)
        desk = make_desk(cheap)
        order = desk.assembler.create_order(
            pickup_command(cart_of((cheap, 2)), coupon_code="FIFTY")
        ).unwrap()

        assert order.subtotal() == Money.of("10.00")
        assert order.discount_amount == Money.of("10.00")
        assert order.total() == Money.of("0.00")

    def test_created_directly_in_confirmed(self):
        widget = line()
        desk = make_desk(widget)
        order = desk.assembler.create_order(pickup_command(cart_of((widget, 1)))).unwrap()
        assert order.status is OrderStatus.CONFIRMED
        assert order.confirmed_at == order.created_at
        assert order.completed_at is None and order.cancelled_at is None
        assert order.order_number.startswith("ORD-")
        assert (order.order_source, order.payment_method, order.payment_status) == (
            "phone",
            "cash",
            "pending",
        )

    def test_decrements_inventory(self):
        widget = line(qty=5)
        gadget = line("inv-2", "prod-2", "Gadget", "2.00", qty=4)
        desk = make_desk(widget, gadget)
        desk.assembler.create_order(pickup_command(cart_of((widget, 2), (gadget, 4))))

        assert desk.store.available("inv-1") == 3
        assert desk.store.available("inv-2") == 0

    def test_items_keep_cart_order_and_prices(self):
        widget = line(price="10.00", qty=5)
        gadget = line("inv-2", "prod-2", "Gadget", "2.49", qty=4)
        desk = make_desk(widget, gadget)
        order = desk.assembler.create_order(
            pickup_command(cart_of((gadget, 2), (widget, 1)))
        ).unwrap()

        assert [(it.name, it.quantity, it.line_subtotal()) for it in order.items] == [
            ("Gadget", 2, Money.of("4.98")),
            ("Widget", 1, Money.of("10.00")),
        ]

    def test_coupon_applied_on_cart_is_used(self):
        widget = line(price="10.00", qty=5)
        desk = make_desk(widget)
        cart = cart_of((widget, 3))
        desk.coupons.apply_to_cart(cart, "TENOFF").unwrap()

        order = desk.assembler.create_order(pickup_command(cart)).unwrap()
        assert order.discount_amount == Money.of("3.00")

    def test_notifies_creation(self):
        widget = line()
        desk = make_desk(widget)
        order = desk.assembler.create_order(pickup_command(cart_of((widget, 1)))).unwrap()

        assert [(e.event, e.order_id) for e in desk.notifier.events] == [
            (ORDER_CREATED, order.order_id)
        ]

    def test_pickup_person_and_notes_trimmed(self):
        widget = line()
        desk = make_desk(widget)
        order = desk.assembler.create_order(
            pickup_command(
                cart_of((widget, 1)),
                fulfillment=Pickup(person_name="  Bob "),
                notes="   ",
            )
        ).unwrap()
        assert order.fulfillment == Pickup(person_name="Bob")
        assert order.notes is None


class TestCreateOrderValidation:

    def test_empty_cart(self):
        desk = make_desk(line())
        result = desk.assembler.create_order(pickup_command(Cart()))
        assert isinstance(result.failure(), ValidationFailed)

    def test_customer_name_required(self):
        widget = line()
        desk = make_desk(widget)
        result = desk.assembler.create_order(
            pickup_command(cart_of((widget, 1)), customer=Customer(name="  "))
        )
        assert result.failure().field_name == "customer.name"

    def test_delivery_without_city_fails_before_stock_check(self):
        widget = line(qty=0)  # would be a stock failure if the check ran
        desk = make_desk(widget)
        cart = Cart()
        cart.add_line("inv-1", "prod-1", "Widget", Money.of("10.00"), 5)
        command = pickup_command(
            cart,
            fulfillment=Delivery(DeliveryAddress("1 Main St", "", "IL", "62701")),
        )

        result = desk.assembler.create_order(command)

        err = result.failure()
        assert isinstance(err, ValidationFailed)
        assert err.field_name == "delivery_address.city"
        assert desk.store.list(STORE).unwrap() == ()

    def test_unknown_coupon(self):
        widget = line()
        desk = make_desk(widget)
        result = desk.assembler.create_order(
            pickup_command(cart_of((widget, 1)), coupon_code="NOPE")
        )
        assert isinstance(result.failure(), CouponNotFound)
        assert desk.store.available("inv-1") == 5

    def test_inactive_coupon(self):
        widget = line()
        desk = make_desk(widget)
        result = desk.assembler.create_order(
            pickup_command(cart_of((widget, 1)), coupon_code="expired")
        )
        assert isinstance(result.failure(), CouponInactive)


class TestInsufficientStock:

    def test_whole_order_rolled_back(self):
        widget = line(qty=5)
        gadget = line("inv-2", "prod-2", "Gadget", "2.00", qty=4)
        desk = make_desk(widget, gadget)
        cart = cart_of((widget, 2), (gadget, 4))

        # another till sells the gadgets after the picker snapshot was taken
        desk.store.put_inventory(line("inv-2", "prod-2", "Gadget", "2.00", qty=1))

        result = desk.assembler.create_order(pickup_command(cart))

        err = result.failure()
        assert isinstance(err, InsufficientStock)
        assert [(s.product_id, s.requested, s.available, s.missing) for s in err.shortages] == [
            ("prod-2", 4, 1, 3)
        ]
        assert err.shortages[0].describe() == "3 units of Gadget no longer available"
        assert desk.store.available("inv-1") == 5
        assert desk.store.available("inv-2") == 1
        assert desk.store.list(STORE).unwrap() == ()
        assert desk.notifier.events == []

    def test_reports_every_short_line(self):
        widget = line(qty=5)
        gadget = line("inv-2", "prod-2", "Gadget", "2.00", qty=4)
        desk = make_desk(widget, gadget)
        cart = cart_of((widget, 5), (gadget, 4))
        desk.store.put_inventory(line(qty=0), line("inv-2", "prod-2", "Gadget", "2.00", qty=0))

        err = desk.assembler.create_order(pickup_command(cart)).failure()
        assert {s.product_id for s in err.shortages} == {"prod-1", "prod-2"}

    def test_retry_after_adjusting_cart_succeeds(self):
        widget = line(qty=5)
        desk = make_desk(widget)
        cart = cart_of((widget, 5))
        desk.store.put_inventory(line(qty=2))

        assert isinstance(desk.assembler.create_order(pickup_command(cart)), Failure)
        cart.set_quantity("prod-1", 2)
        assert isinstance(desk.assembler.create_order(pickup_command(cart)), Success)
        assert desk.store.available("inv-1") == 0


class TestConcurrentCommits:

    def test_two_tills_one_wins(self):
        widget = line(qty=5)
        desk = make_desk(widget)
        barrier = threading.Barrier(2)
        results = []

        def till():
            cart = cart_of((widget, 3))
            barrier.wait()
            results.append(desk.assembler.create_order(pickup_command(cart)))

        threads = [threading.Thread(target=till) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(isinstance(r, Success) for r in results) == 1
        failures = [r.failure() for r in results if isinstance(r, Failure)]
        assert len(failures) == 1 and isinstance(failures[0], InsufficientStock)
        assert desk.store.available("inv-1") == 2
        assert len(desk.store.list(STORE).unwrap()) == 1


class TestOrderNumbers:

    def test_collision_retries_with_new_number(self):
        widget = line(qty=5)
        desk = make_desk(widget, order_numbers=numbers("ORD-A", "ORD-A", "ORD-B"))
        first = desk.assembler.create_order(pickup_command(cart_of((widget, 1)))).unwrap()
        second = desk.assembler.create_order(pickup_command(cart_of((widget, 1)))).unwrap()

        assert (first.order_number, second.order_number) == ("ORD-A", "ORD-B")
        assert desk.store.available("inv-1") == 3

    def test_gives_up_after_max_attempts(self):
        widget = line(qty=5)
        desk = make_desk(
            widget,
            order_numbers=numbers("ORD-A", "ORD-A", "ORD-A"),
            max_number_attempts=2,
        )
        desk.assembler.create_order(pickup_command(cart_of((widget, 1)))).unwrap()

        result = desk.assembler.create_order(pickup_command(cart_of((widget, 1))))
        assert isinstance(result.failure(), PersistenceFailure)
        assert desk.store.available("inv-1") == 4


class TestNotifierFailures:

    @pytest.mark.parametrize("notifier", [FailingNotifier(), RaisingNotifier()])
    def test_order_survives_notifier_failure(self, notifier, caplog):
        widget = line(qty=5)
        desk = make_desk(widget, notifier=notifier)

        result = desk.assembler.create_order(pickup_command(cart_of((widget, 2))))

        assert isinstance(result, Success)
        assert desk.store.available("inv-1") == 3
        assert "dropped" in caplog.text or "notifier raised" in caplog.text
