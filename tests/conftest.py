"""
Pytest fixtures for the order kernel test suite.

Provides:
- An in-memory SQLite database per test (StaticPool, one shared connection)
- Factory fixtures for enterprises, order cycles, exchanges, fees and orders
- Recalculation settings and structured log capture

Environment Variables:
- DATABASE_URL: run the database tests against another engine (e.g. a
  PostgreSQL URL).  Defaults to in-memory SQLite.
"""

import json
import logging
import os
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from order_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from order_kernel.domain.dtos import RecalculationSettings
from order_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from order_kernel.models import (
    Enterprise,
    EnterpriseFee,
    Exchange,
    LineItem,
    Order,
    OrderCycle,
    OrderState,
    Payment,
    PaymentMethod,
    Product,
    Shipment,
    ShippingMethod,
    User,
    Variant,
)
from order_kernel.services.adjustment_ledger import AdjustmentLedger

DEFAULT_DATABASE_URL = "sqlite://"


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture order_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, line_item_service):
            line_item_service.destroy(...)
            logs = captured_logs()
            assert any(r["message"] == "line_item_destroyed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("order_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Fresh engine and schema for each test."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    drop_tables()
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def settings() -> RecalculationSettings:
    """No tax-inclusive shipping or payment fees."""
    return RecalculationSettings()


@pytest.fixture
def vat_settings() -> RecalculationSettings:
    """Shipping fees include 25% VAT."""
    return RecalculationSettings(
        shipment_inc_vat=True,
        shipping_tax_rate=Decimal("0.25"),
    )


# =============================================================================
# Test data generators
# =============================================================================


@pytest.fixture
def create_user(session: Session):
    """Factory fixture to create customers."""

    def _create_user(email: str | None = None) -> User:
        user = User(email=email or f"{uuid4().hex[:8]}@example.com")
        session.add(user)
        session.flush()
        return user

    return _create_user


@pytest.fixture
def create_enterprise(session: Session):
    """Factory fixture to create producers, hubs and shops."""

    def _create_enterprise(
        name: str,
        is_distributor: bool = True,
        charges_sales_tax: bool = False,
        allow_order_changes: bool = True,
    ) -> Enterprise:
        enterprise = Enterprise(
            name=name,
            is_distributor=is_distributor,
            charges_sales_tax=charges_sales_tax,
            allow_order_changes=allow_order_changes,
        )
        session.add(enterprise)
        session.flush()
        return enterprise

    return _create_enterprise


@pytest.fixture
def create_variant(session: Session, create_enterprise):
    """Factory fixture to create a product with one variant."""

    def _create_variant(
        price: Decimal = Decimal("10.00"),
        supplier: Enterprise | None = None,
        sku: str = "",
    ) -> Variant:
        supplier = supplier or create_enterprise("Supplier", is_distributor=False)
        product = Product(name=f"Product {sku or uuid4().hex[:6]}", supplier=supplier)
        variant = Variant(product=product, sku=sku, price=price)
        session.add_all([product, variant])
        session.flush()
        return variant

    return _create_variant


@pytest.fixture
def create_order_cycle(session: Session):
    """Factory fixture to create an order cycle coordinated by a distributor."""

    def _create_order_cycle(
        coordinator: Enterprise,
        distributors: list[Enterprise] | None = None,
        name: str = "Weekly",
    ) -> OrderCycle:
        order_cycle = OrderCycle(
            name=name,
            coordinator=coordinator,
            distributors=list(distributors or [coordinator]),
        )
        session.add(order_cycle)
        session.flush()
        return order_cycle

    return _create_order_cycle


@pytest.fixture
def create_enterprise_fee(session: Session):
    """Factory fixture to create enterprise fees."""

    def _create_enterprise_fee(
        enterprise: Enterprise,
        name: str = "Admin fee",
        calculator_kind: str = "per_item",
        preferences: dict | None = None,
        tax_rate: Decimal | None = None,
        inclusive_tax: bool = False,
    ) -> EnterpriseFee:
        fee = EnterpriseFee(
            enterprise=enterprise,
            name=name,
            calculator_kind=calculator_kind,
            calculator_preferences=preferences if preferences is not None else {"amount": "1.00"},
            tax_rate=tax_rate,
            inclusive_tax=inclusive_tax,
        )
        session.add(fee)
        session.flush()
        return fee

    return _create_enterprise_fee


@pytest.fixture
def create_exchange(session: Session):
    """Factory fixture to create an exchange carrying variants and fees."""

    def _create_exchange(
        order_cycle: OrderCycle,
        sender: Enterprise,
        receiver: Enterprise,
        variants: list[Variant] = (),
        fees: list[EnterpriseFee] = (),
        incoming: bool = True,
    ) -> Exchange:
        exchange = Exchange(
            order_cycle=order_cycle,
            sender_id=sender.id,
            receiver_id=receiver.id,
            incoming=incoming,
            variants=list(variants),
            enterprise_fees=list(fees),
        )
        session.add(exchange)
        session.flush()
        return exchange

    return _create_exchange


@pytest.fixture
def create_shipping_method(session: Session):
    """Factory fixture to create a distributor's shipping method."""

    def _create_shipping_method(
        distributor: Enterprise,
        calculator_kind: str = "per_item",
        preferences: dict | None = None,
        name: str = "Delivery",
    ) -> ShippingMethod:
        method = ShippingMethod(
            distributor=distributor,
            name=name,
            calculator_kind=calculator_kind,
            calculator_preferences=preferences if preferences is not None else {"amount": "3"},
        )
        session.add(method)
        session.flush()
        return method

    return _create_shipping_method


@pytest.fixture
def create_payment_method(session: Session):
    """Factory fixture to create a distributor's payment method."""

    def _create_payment_method(
        distributor: Enterprise,
        calculator_kind: str = "per_item",
        preferences: dict | None = None,
        name: str = "Card",
    ) -> PaymentMethod:
        method = PaymentMethod(
            distributor=distributor,
            name=name,
            calculator_kind=calculator_kind,
            calculator_preferences=preferences if preferences is not None else {"amount": "5"},
        )
        session.add(method)
        session.flush()
        return method

    return _create_payment_method


@pytest.fixture
def create_order(session: Session, settings: RecalculationSettings):
    """
    Factory fixture to create an order with line items.

    The order's adjustments are priced once with ``ledger_settings`` (or
    the plain ``settings`` fixture) so tests start from a consistent ledger.
    """

    def _create_order(
        user: User | None,
        distributor: Enterprise | None,
        order_cycle: OrderCycle | None,
        variants: list[Variant] = (),
        quantities: list[int] | None = None,
        shipping_method: ShippingMethod | None = None,
        payment_method: PaymentMethod | None = None,
        completed: bool = True,
        ledger_settings: RecalculationSettings | None = None,
    ) -> Order:
        order = Order(
            user=user,
            distributor=distributor,
            order_cycle=order_cycle,
            state=OrderState.CART,
        )
        session.add(order)
        quantities = quantities or [1] * len(variants)
        for variant, quantity in zip(variants, quantities):
            order.line_items.append(
                LineItem(variant=variant, quantity=quantity, price=variant.price)
            )
        if shipping_method is not None:
            order.shipment = Shipment(shipping_method=shipping_method)
        if payment_method is not None:
            order.payment = Payment(payment_method=payment_method)
        if completed:
            order.complete()
        session.flush()

        AdjustmentLedger(session, ledger_settings or settings).recalculate(order)
        return order

    return _create_order


# =============================================================================
# Common scenario
# =============================================================================


@pytest.fixture
def customer(create_user) -> User:
    return create_user("customer@example.com")


@pytest.fixture
def shop(create_enterprise) -> Enterprise:
    """A distributor that charges sales tax and allows order changes."""
    return create_enterprise("Shop", charges_sales_tax=True, allow_order_changes=True)


@pytest.fixture
def order_cycle(create_order_cycle, shop) -> OrderCycle:
    return create_order_cycle(shop)


@pytest.fixture
def shop_order(
    create_order,
    create_variant,
    create_shipping_method,
    create_payment_method,
    customer,
    shop,
    order_cycle,
    vat_settings,
) -> Order:
    """
    Completed order with two line items, per-item shipping of 3 (25% VAT
    inclusive) and per-item payment fee of 5.
    """
    variants = [create_variant(Decimal("10.00"), sku="A"), create_variant(Decimal("4.50"), sku="B")]
    return create_order(
        customer,
        shop,
        order_cycle,
        variants=variants,
        shipping_method=create_shipping_method(shop),
        payment_method=create_payment_method(shop),
        ledger_settings=vat_settings,
    )


@pytest.fixture
def missing_id() -> UUID:
    return uuid4()
