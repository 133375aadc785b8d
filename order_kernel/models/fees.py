"""
Module: order_kernel.models.fees
Responsibility: ORM persistence for everything that originates an
    adjustment: enterprise fees, shipping methods and payment methods.
    Each carries a calculator kind and its preferences.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - calculator_preferences values are stored as strings so Decimal
      precision survives the JSON round trip.  They are parsed and validated
      by domain/calculators.py at recalculation time, never here.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from order_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from order_kernel.models.enterprise import Enterprise


class CalculatorMixin:
    """Calculator kind and preferences for an adjustment originator."""

    calculator_kind: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="flat",
    )

    calculator_preferences: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    @property
    def preferred_amount(self) -> Decimal | None:
        """Configured amount preference, without running the calculator."""
        raw = (self.calculator_preferences or {}).get("amount")
        return Decimal(str(raw)) if raw is not None else None


class EnterpriseFeeType(str, Enum):
    """What an enterprise fee pays for."""

    ADMIN = "admin"
    SALES = "sales"
    PACKING = "packing"
    TRANSPORT = "transport"
    FUNDRAISING = "fundraising"


class EnterpriseFee(CalculatorMixin, TrackedBase):
    """
    A fee charged by a marketplace participant and attached to exchanges.

    Contract:
        When tax_rate is set and the order's distributor charges sales tax,
        the fee amount is decomposed with that rate.  inclusive_tax states
        whether the computed amount already contains the tax.
    """

    __tablename__ = "enterprise_fees"

    enterprise_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    fee_type: Mapped[EnterpriseFeeType] = mapped_column(
        String(20),
        nullable=False,
        default=EnterpriseFeeType.ADMIN,
    )

    tax_rate: Mapped[Decimal | None] = mapped_column(Numeric(38, 18), nullable=True)

    inclusive_tax: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    enterprise: Mapped["Enterprise"] = relationship()

    def __repr__(self) -> str:
        return f"<EnterpriseFee {self.name} ({self.calculator_kind})>"


class ShippingMethod(CalculatorMixin, TrackedBase):
    """A distributor's shipping option; its calculator prices the shipment."""

    __tablename__ = "shipping_methods"

    distributor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    distributor: Mapped["Enterprise"] = relationship()

    def __repr__(self) -> str:
        return f"<ShippingMethod {self.name}>"


class PaymentMethod(CalculatorMixin, TrackedBase):
    """A distributor's payment option; its calculator prices the payment fee."""

    __tablename__ = "payment_methods"

    distributor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    distributor: Mapped["Enterprise"] = relationship()

    def __repr__(self) -> str:
        return f"<PaymentMethod {self.name}>"
