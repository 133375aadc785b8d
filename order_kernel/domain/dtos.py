"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable snapshots that flow into the recalculation
    pipeline (line items, distributor flags, calculator specs, exchanges,
    the order snapshot) and the settings that parameterise it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers (never from domain logic).

Invariants enforced:
    - Domain logic accepts and returns DTOs, never ORM entities.
    - Calculator preferences are deep-frozen so strategies cannot mutate
      their configuration.
    - Monetary fields are Decimal, never float.

Data flow:
    Order (ORM) -> OrderSnapshot -> LedgerPlan -> Adjustment rows (ORM)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping
from uuid import UUID

if TYPE_CHECKING:
    from order_kernel.models.enterprise import Enterprise as EnterpriseModel
    from order_kernel.models.fees import CalculatorMixin
    from order_kernel.models.fees import EnterpriseFee as EnterpriseFeeModel
    from order_kernel.models.order import LineItem as LineItemModel
    from order_kernel.models.order import Order as OrderModel
    from order_kernel.models.order_cycle import Exchange as ExchangeModel


class AdjustmentSource(str, Enum):
    """Which ledger slot a planned adjustment fills."""

    SHIPMENT = "shipment"
    PAYMENT = "payment"
    ENTERPRISE_FEE = "enterprise_fee"


# Persisted originator_type values by the slot they fill.
_SOURCE_BY_ORIGINATOR = {
    "shipping_method": AdjustmentSource.SHIPMENT,
    "payment_method": AdjustmentSource.PAYMENT,
    "enterprise_fee": AdjustmentSource.ENTERPRISE_FEE,
}

SlotKey = tuple[AdjustmentSource, UUID | None, UUID | None]


@dataclass(frozen=True)
class LineItemData:
    """Snapshot of one line item."""

    id: UUID
    variant_id: UUID
    quantity: int
    price: Decimal = Decimal("0")

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_model(cls, line_item: LineItemModel) -> LineItemData:
        return cls(
            id=line_item.id,
            variant_id=line_item.variant_id,
            quantity=line_item.quantity,
            price=line_item.price,
        )


@dataclass(frozen=True)
class DistributorData:
    """The distributor flags the ledger and deletion policy read."""

    id: UUID
    charges_sales_tax: bool = False
    allow_order_changes: bool = False

    @classmethod
    def from_model(cls, enterprise: EnterpriseModel) -> DistributorData:
        return cls(
            id=enterprise.id,
            charges_sales_tax=bool(enterprise.charges_sales_tax),
            allow_order_changes=bool(enterprise.allow_order_changes),
        )


@dataclass(frozen=True)
class CalculatorSpec:
    """
    A calculator kind plus its raw preferences.

    Preferences are kept as given (usually strings from JSON) and parsed by
    the calculator itself, so a malformed value surfaces as
    InvalidCalculatorConfigError at recalculation time.
    """

    kind: str
    preferences: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "preferences", MappingProxyType(dict(self.preferences or {}))
        )

    @classmethod
    def from_model(cls, originator: CalculatorMixin) -> CalculatorSpec:
        return cls(
            kind=originator.calculator_kind,
            preferences=originator.calculator_preferences or {},
        )


@dataclass(frozen=True)
class FeeMethodData:
    """A shipping or payment method: who originates the fee and how to price it."""

    id: UUID
    name: str
    calculator: CalculatorSpec

    @classmethod
    def from_model(cls, method: Any) -> FeeMethodData:
        return cls(
            id=method.id,
            name=method.name,
            calculator=CalculatorSpec.from_model(method),
        )


@dataclass(frozen=True)
class EnterpriseFeeData:
    """An enterprise fee and its tax treatment."""

    id: UUID
    name: str
    calculator: CalculatorSpec
    tax_rate: Decimal | None = None
    inclusive_tax: bool = False

    @classmethod
    def from_model(cls, fee: EnterpriseFeeModel) -> EnterpriseFeeData:
        return cls(
            id=fee.id,
            name=fee.name,
            calculator=CalculatorSpec.from_model(fee),
            tax_rate=fee.tax_rate,
            inclusive_tax=bool(fee.inclusive_tax),
        )


@dataclass(frozen=True)
class ExchangeData:
    """An exchange's routing, eligible variants and fees."""

    id: UUID
    receiver_id: UUID
    incoming: bool
    variant_ids: frozenset[UUID]
    fees: tuple[EnterpriseFeeData, ...] = ()

    def applies_to(self, distributor_id: UUID | None) -> bool:
        if self.incoming:
            return True
        return distributor_id is not None and self.receiver_id == distributor_id

    def matching_items(self, line_items: tuple[LineItemData, ...]) -> tuple[LineItemData, ...]:
        return tuple(li for li in line_items if li.variant_id in self.variant_ids)

    @classmethod
    def from_model(cls, exchange: ExchangeModel) -> ExchangeData:
        return cls(
            id=exchange.id,
            receiver_id=exchange.receiver_id,
            incoming=bool(exchange.incoming),
            variant_ids=frozenset(v.id for v in exchange.variants),
            fees=tuple(EnterpriseFeeData.from_model(f) for f in exchange.enterprise_fees),
        )


@dataclass(frozen=True)
class OrderSnapshot:
    """Everything the ledger needs to price an order, frozen at one instant."""

    id: UUID
    line_items: tuple[LineItemData, ...]
    distributor: DistributorData | None = None
    shipping_method: FeeMethodData | None = None
    payment_method: FeeMethodData | None = None
    exchanges: tuple[ExchangeData, ...] = ()
    canceled_slots: frozenset[SlotKey] = frozenset()

    @property
    def item_total(self) -> Decimal:
        return sum((li.amount for li in self.line_items), Decimal("0"))

    def is_canceled(
        self,
        source: AdjustmentSource,
        originator_id: UUID,
        exchange_id: UUID | None = None,
    ) -> bool:
        """Whether the persisted adjustment filling this slot was canceled."""
        if source is AdjustmentSource.ENTERPRISE_FEE:
            return (source, originator_id, exchange_id) in self.canceled_slots
        return (source, None, None) in self.canceled_slots

    @classmethod
    def from_model(cls, order: OrderModel) -> OrderSnapshot:
        exchanges: tuple[ExchangeData, ...] = ()
        if order.order_cycle is not None:
            exchanges = tuple(ExchangeData.from_model(ex) for ex in order.order_cycle.exchanges)
        return cls(
            id=order.id,
            line_items=tuple(LineItemData.from_model(li) for li in order.line_items),
            distributor=(
                DistributorData.from_model(order.distributor)
                if order.distributor is not None
                else None
            ),
            shipping_method=(
                FeeMethodData.from_model(order.shipment.shipping_method)
                if order.shipment is not None
                else None
            ),
            payment_method=(
                FeeMethodData.from_model(order.payment.payment_method)
                if order.payment is not None
                else None
            ),
            exchanges=exchanges,
            canceled_slots=frozenset(_canceled_slots(order)),
        )


def _canceled_slots(order: OrderModel) -> list[SlotKey]:
    slots: list[SlotKey] = []
    for adjustment in order.adjustments:
        if adjustment.state != "canceled":
            continue
        source = _SOURCE_BY_ORIGINATOR[adjustment.originator_type]
        if source is AdjustmentSource.ENTERPRISE_FEE:
            slots.append((source, adjustment.originator_id, adjustment.exchange_id))
        else:
            slots.append((source, None, None))
    return slots


@dataclass(frozen=True)
class RecalculationSettings:
    """
    Explicit tax configuration for one recalculation.

    Built from order_config.MarketplaceConfig by the config bridge; the
    kernel never reads configuration files or globals itself.
    """

    shipment_inc_vat: bool = False
    shipping_tax_rate: Decimal = Decimal("0")
    payment_inc_vat: bool = False
    payment_tax_rate: Decimal = Decimal("0")
    decimal_places: int = 2
