"""
Module: order_kernel.models.order_cycle
Responsibility: ORM persistence for order cycles and their exchanges.  An
    exchange links a sender to a receiver within a cycle, lists the variants
    that flow through it, and carries the enterprise fees charged on them.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Incoming exchanges (supplier -> coordinator) apply to every
      distributor of the cycle; outgoing exchanges (coordinator ->
      distributor) apply only to orders distributed by their receiver.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from order_kernel.db.base import Base, TrackedBase, UUIDString

if TYPE_CHECKING:
    from order_kernel.models.catalog import Variant
    from order_kernel.models.enterprise import Enterprise
    from order_kernel.models.fees import EnterpriseFee


order_cycle_distributors = Table(
    "order_cycle_distributors",
    Base.metadata,
    Column("order_cycle_id", UUIDString(), ForeignKey("order_cycles.id"), primary_key=True),
    Column("distributor_id", UUIDString(), ForeignKey("enterprises.id"), primary_key=True),
)

exchange_variants = Table(
    "exchange_variants",
    Base.metadata,
    Column("exchange_id", UUIDString(), ForeignKey("exchanges.id"), primary_key=True),
    Column("variant_id", UUIDString(), ForeignKey("variants.id"), primary_key=True),
)

exchange_fees = Table(
    "exchange_fees",
    Base.metadata,
    Column("exchange_id", UUIDString(), ForeignKey("exchanges.id"), primary_key=True),
    Column("enterprise_fee_id", UUIDString(), ForeignKey("enterprise_fees.id"), primary_key=True),
)


class OrderCycle(TrackedBase):
    """A trading window coordinated by one enterprise."""

    __tablename__ = "order_cycles"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    coordinator_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    coordinator: Mapped["Enterprise"] = relationship()

    distributors: Mapped[list["Enterprise"]] = relationship(
        secondary=order_cycle_distributors,
    )

    exchanges: Mapped[list["Exchange"]] = relationship(
        back_populates="order_cycle",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<OrderCycle {self.name}>"


class Exchange(TrackedBase):
    """A configured product flow between a sender and a receiver."""

    __tablename__ = "exchanges"

    order_cycle_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("order_cycles.id"),
        nullable=False,
    )

    sender_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    receiver_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    incoming: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    order_cycle: Mapped["OrderCycle"] = relationship(back_populates="exchanges")

    sender: Mapped["Enterprise"] = relationship(foreign_keys=[sender_id])

    receiver: Mapped["Enterprise"] = relationship(foreign_keys=[receiver_id])

    variants: Mapped[list["Variant"]] = relationship(secondary=exchange_variants)

    enterprise_fees: Mapped[list["EnterpriseFee"]] = relationship(
        secondary=exchange_fees,
    )

    def applies_to_distributor(self, distributor_id: UUID | None) -> bool:
        """Whether fees on this exchange are charged to the distributor's orders."""
        if self.incoming:
            return True
        return distributor_id is not None and self.receiver_id == distributor_id

    def __repr__(self) -> str:
        direction = "incoming" if self.incoming else "outgoing"
        return f"<Exchange {direction} {self.sender_id} -> {self.receiver_id}>"
