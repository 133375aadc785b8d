"""
Module: order_kernel.models.adjustment
Responsibility: ORM persistence for adjustments: the shipping fee, payment
    fee and enterprise fee charges attached to an order.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Every adjustment belongs to exactly one order.  Shipping and payment
      fee adjustments additionally reference their shipment or payment;
      enterprise fee adjustments reference the exchange they were charged
      through.
    - included_tax has the same sign as amount and never exceeds it in
      magnitude.
    - Rows are created and rewritten only by the recalculation services.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from order_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from order_kernel.models.order import Order, Payment, Shipment


class OriginatorType(str, Enum):
    """What produced an adjustment."""

    SHIPPING_METHOD = "shipping_method"
    PAYMENT_METHOD = "payment_method"
    ENTERPRISE_FEE = "enterprise_fee"


class AdjustmentState(str, Enum):
    """Adjustment lifecycle.  Canceled adjustments do not count toward totals."""

    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"


class Adjustment(TrackedBase):
    """A monetary charge attached to an order component."""

    __tablename__ = "adjustments"

    __table_args__ = (
        Index("idx_adjustment_order", "order_id"),
        Index("idx_adjustment_originator", "originator_type", "originator_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id"),
        nullable=False,
    )

    shipment_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("shipments.id"),
        nullable=True,
    )

    payment_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("payments.id"),
        nullable=True,
    )

    exchange_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("exchanges.id"),
        nullable=True,
    )

    originator_type: Mapped[OriginatorType] = mapped_column(
        String(20),
        nullable=False,
    )

    originator_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    label: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    included_tax: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    state: Mapped[AdjustmentState] = mapped_column(
        String(20),
        nullable=False,
        default=AdjustmentState.OPEN,
    )

    order: Mapped["Order"] = relationship(back_populates="adjustments")

    shipment: Mapped["Shipment | None"] = relationship(back_populates="adjustment")

    payment: Mapped["Payment | None"] = relationship(back_populates="adjustment")

    @property
    def is_canceled(self) -> bool:
        """Check if the adjustment has been canceled."""
        return self.state == AdjustmentState.CANCELED

    def __repr__(self) -> str:
        return f"<Adjustment {self.label}: {self.amount} (tax {self.included_tax})>"
