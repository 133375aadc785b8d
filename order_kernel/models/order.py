"""
Module: order_kernel.models.order
Responsibility: ORM persistence for orders, their line items, and the
    shipment and payment that carry shipping and payment fee adjustments.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Order state only moves forward through ORDER_STATE_SEQUENCE; once
      COMPLETE it never reverts (advance_to raises ValueError).
    - line_items keep their insertion order through the position column
      (managed by ordering_list).
    - adjustment_total is written only by the recalculation services and
      always equals the sum of the order's non-canceled adjustments.

Failure modes:
    - ValueError from advance_to() on a backwards transition.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from order_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from order_kernel.models.adjustment import Adjustment
    from order_kernel.models.catalog import Variant
    from order_kernel.models.enterprise import Enterprise, User
    from order_kernel.models.fees import PaymentMethod, ShippingMethod
    from order_kernel.models.order_cycle import OrderCycle


class OrderState(str, Enum):
    """Checkout states, in the only order an order may pass through them."""

    CART = "cart"
    ADDRESS = "address"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    CONFIRM = "confirm"
    COMPLETE = "complete"


ORDER_STATE_SEQUENCE: tuple[OrderState, ...] = tuple(OrderState)


def _generate_order_number() -> str:
    return "R" + uuid4().hex[:10].upper()


class Order(TrackedBase):
    """
    A customer order placed with one distributor during one order cycle.

    Guarantees:
        - distributor and order_cycle are optional until assigned.
        - completed_at is set exactly once, when the order reaches COMPLETE.
        - total == item_total + adjustment_total after every recalculation.
    """

    __tablename__ = "orders"

    __table_args__ = (
        UniqueConstraint("number", name="uq_order_number"),
    )

    number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=_generate_order_number,
    )

    user_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=True,
    )

    distributor_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=True,
    )

    order_cycle_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("order_cycles.id"),
        nullable=True,
    )

    state: Mapped[OrderState] = mapped_column(
        String(20),
        nullable=False,
        default=OrderState.CART,
    )

    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    item_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    adjustment_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    user: Mapped["User | None"] = relationship()

    distributor: Mapped["Enterprise | None"] = relationship()

    order_cycle: Mapped["OrderCycle | None"] = relationship()

    line_items: Mapped[list["LineItem"]] = relationship(
        back_populates="order",
        order_by="LineItem.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    shipment: Mapped["Shipment | None"] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )

    payment: Mapped["Payment | None"] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )

    adjustments: Mapped[list["Adjustment"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )

    @property
    def is_completed(self) -> bool:
        """Check if the order has reached the COMPLETE state."""
        return self.state == OrderState.COMPLETE

    def advance_to(self, state: OrderState) -> None:
        """
        Move the order forward to ``state``.

        Raises:
            ValueError: If ``state`` precedes the current state.
        """
        current = ORDER_STATE_SEQUENCE.index(OrderState(self.state))
        target = ORDER_STATE_SEQUENCE.index(OrderState(state))
        if target < current:
            raise ValueError(
                f"Order {self.number} cannot move from {self.state} back to {state}"
            )
        self.state = OrderState(state)
        if self.state == OrderState.COMPLETE and self.completed_at is None:
            self.completed_at = datetime.now(UTC)

    def complete(self) -> None:
        """Advance straight to COMPLETE."""
        self.advance_to(OrderState.COMPLETE)

    def __repr__(self) -> str:
        return f"<Order {self.number} ({self.state})>"


class LineItem(TrackedBase):
    """One variant-quantity entry within an order."""

    __tablename__ = "line_items"

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id"),
        nullable=False,
    )

    variant_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("variants.id"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped["Order"] = relationship(back_populates="line_items")

    variant: Mapped["Variant"] = relationship()

    @property
    def amount(self) -> Decimal:
        """Line subtotal: unit price times quantity."""
        return self.price * self.quantity

    def __repr__(self) -> str:
        return f"<LineItem {self.variant_id} x{self.quantity}>"


class Shipment(TrackedBase):
    """The single shipment of an order; carries the shipping fee adjustment."""

    __tablename__ = "shipments"

    __table_args__ = (
        UniqueConstraint("order_id", name="uq_shipment_order"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id"),
        nullable=False,
    )

    shipping_method_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("shipping_methods.id"),
        nullable=False,
    )

    order: Mapped["Order"] = relationship(back_populates="shipment")

    shipping_method: Mapped["ShippingMethod"] = relationship()

    adjustment: Mapped["Adjustment | None"] = relationship(back_populates="shipment")

    def __repr__(self) -> str:
        return f"<Shipment order={self.order_id}>"


class Payment(TrackedBase):
    """The single payment of an order; carries the payment fee adjustment."""

    __tablename__ = "payments"

    __table_args__ = (
        UniqueConstraint("order_id", name="uq_payment_order"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id"),
        nullable=False,
    )

    payment_method_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("payment_methods.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    order: Mapped["Order"] = relationship(back_populates="payment")

    payment_method: Mapped["PaymentMethod"] = relationship()

    adjustment: Mapped["Adjustment | None"] = relationship(back_populates="payment")

    def __repr__(self) -> str:
        return f"<Payment order={self.order_id} amount={self.amount}>"
