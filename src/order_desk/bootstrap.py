from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from order_desk.adapters.outbound.in_memory_coupons import InMemoryCouponRegistry
from order_desk.adapters.outbound.in_memory_store import InMemoryStore
from order_desk.adapters.outbound.logging_notifier import LoggingOrderNotifier
from order_desk.adapters.outbound.sqlalchemy_store import (
    SqlCouponRegistry,
    SqlStore,
    create_sql_engine,
)
from order_desk.config import Settings
from order_desk.core.domain.model.coupon import Coupon, DiscountType
from order_desk.core.domain.model.inventory import InventoryLine
from order_desk.core.domain.model.money import Money
from order_desk.core.domain.service.coupon_evaluator import (
    CouponEvaluator,
    CouponEvaluatorDeps,
)
from order_desk.core.domain.service.get_order_service import (
    GetOrderDeps,
    GetOrderService,
)
from order_desk.core.domain.service.list_orders_service import (
    ListOrdersDeps,
    ListOrdersService,
)
from order_desk.core.domain.service.order_assembler import (
    OrderAssembler,
    OrderAssemblerDeps,
)
from order_desk.core.domain.service.sellable_inventory_service import (
    SellableInventoryDeps,
    SellableInventoryService,
)
from order_desk.core.domain.service.transition_order_service import (
    TransitionOrderDeps,
    TransitionOrderService,
)
from order_desk.core.ports.outbound.coupons import CouponRegistry
from order_desk.core.ports.outbound.events import OrderNotifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UseCases:
    settings: Settings
    inventory: SellableInventoryService
    coupons: CouponEvaluator
    create_order: OrderAssembler
    transition_order: TransitionOrderService
    get_order: GetOrderService
    list_orders: ListOrdersService


def build_usecases(
    settings: Settings | None = None, notifier: OrderNotifier | None = None
) -> UseCases:
    settings = settings or Settings.from_env()
    notifier = notifier or LoggingOrderNotifier()

    registry: CouponRegistry
    if settings.storage == "sql":
        engine = create_sql_engine(
            settings.database_url, timeout_seconds=settings.commit_timeout_seconds
        )
        store: InMemoryStore | SqlStore = SqlStore(engine)
        registry = SqlCouponRegistry(engine)
        logger.info("using sql storage at %s", engine.url.render_as_string())
    else:
        store = InMemoryStore()
        mem_registry = InMemoryCouponRegistry()
        _seed_demo(store, mem_registry, settings)
        registry = mem_registry
        logger.info("using in-memory storage with demo data")

    coupons = CouponEvaluator(CouponEvaluatorDeps(coupons=registry))
    return UseCases(
        settings=settings,
        inventory=SellableInventoryService(SellableInventoryDeps(inventory=store)),
        coupons=coupons,
        create_order=OrderAssembler(
            OrderAssemblerDeps(
                orders=store,
                coupons=coupons,
                notifier=notifier,
                max_number_attempts=settings.order_number_attempts,
            )
        ),
        transition_order=TransitionOrderService(
            TransitionOrderDeps(orders=store, notifier=notifier)
        ),
        get_order=GetOrderService(GetOrderDeps(orders=store)),
        list_orders=ListOrdersService(ListOrdersDeps(orders=store)),
    )


def _seed_demo(
    store: InMemoryStore, registry: InMemoryCouponRegistry, settings: Settings
) -> None:
    sid = settings.default_store_id
    cur = settings.currency
    store.put_inventory(
        InventoryLine("inv-1", sid, "prod-1", "House Red 750ml", Money.of("12.50", cur), 10),
        InventoryLine("inv-2", sid, "prod-2", "Pale Ale 6-pack", Money.of("9.99", cur), 5),
        InventoryLine("inv-3", sid, "prod-3", "Sparkling Water", Money.of("1.25", cur), 40),
    )
    registry.put(
        Coupon("cpn-1", "WELCOME10", DiscountType.PERCENTAGE, Decimal("10")),
        Coupon("cpn-2", "FIVEOFF", DiscountType.FIXED, Decimal("5.00")),
        Coupon("cpn-3", "SUMMER", DiscountType.PERCENTAGE, Decimal("15"), is_active=False),
    )
