"""
Ledger -- Pure planning of an order's adjustments.

Responsibility:
    plan_adjustments() prices every adjustment an order should carry, given
    a frozen OrderSnapshot and explicit RecalculationSettings:

      1. Shipment and payment adjustments: the method's calculator applied
         to the whole order.  When the setting says the fee is tax-inclusive
         and the distributor charges sales tax, the amount is decomposed
         with the configured rate.
      2. Enterprise fee adjustments: for each exchange that applies to the
         order's distributor, each fee's calculator applied to the line
         items whose variant flows through the exchange.  No matching
         items means an amount of exactly zero, never a stale value.
      3. adjustment_total is the sum of the planned amounts, leaving out
         slots whose persisted adjustment was canceled.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The service layer
    (services/adjustment_ledger.py) applies a LedgerPlan to persisted rows.

Invariants enforced:
    - Every amount is computed before anything is applied, so a computation
      error leaves the persisted ledger untouched.
    - Each gross amount is rounded once; included tax is derived from the
      rounded gross.
    - plan.adjustment_total == sum of every planned amount whose persisted
      slot has not been canceled, matching the order's own total.

Failure modes:
    - ComputationError subclasses from calculators and the tax resolver
      propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from order_kernel.db.types import ZERO, round_money
from order_kernel.domain.calculators import OrderTarget, compute
from order_kernel.domain.dtos import (
    AdjustmentSource,
    CalculatorSpec,
    DistributorData,
    OrderSnapshot,
    RecalculationSettings,
)
from order_kernel.domain.tax import decompose, validate_tax_rate


@dataclass(frozen=True)
class PlannedAdjustment:
    """One adjustment as it should exist after recalculation."""

    source: AdjustmentSource
    originator_id: UUID
    label: str
    amount: Decimal
    included_tax: Decimal = ZERO
    exchange_id: UUID | None = None
    canceled: bool = False

    @property
    def key(self) -> tuple[AdjustmentSource, UUID, UUID | None]:
        """Identity of the ledger slot this adjustment fills."""
        return (self.source, self.originator_id, self.exchange_id)


@dataclass(frozen=True)
class LedgerPlan:
    """The complete adjustment set for an order."""

    order_id: UUID
    item_total: Decimal
    shipment: PlannedAdjustment | None = None
    payment: PlannedAdjustment | None = None
    enterprise_fees: tuple[PlannedAdjustment, ...] = ()

    @property
    def adjustments(self) -> tuple[PlannedAdjustment, ...]:
        fixed = tuple(a for a in (self.shipment, self.payment) if a is not None)
        return fixed + self.enterprise_fees

    @property
    def adjustment_total(self) -> Decimal:
        return total(a.amount for a in self.adjustments if not a.canceled)

    @property
    def order_total(self) -> Decimal:
        return self.item_total + self.adjustment_total


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum adjustment amounts."""
    return sum(amounts, ZERO)


def _charges_tax(distributor: DistributorData | None) -> bool:
    return distributor is not None and distributor.charges_sales_tax


def _priced(
    source: AdjustmentSource,
    originator_id: UUID,
    label: str,
    calculator: CalculatorSpec,
    target: OrderTarget,
    *,
    taxable: bool,
    tax_rate: Decimal | None,
    inclusive: bool,
    decimal_places: int,
    exchange_id: UUID | None = None,
    canceled: bool = False,
) -> PlannedAdjustment:
    amount = round_money(compute(calculator, target), decimal_places)
    included_tax = ZERO
    if taxable and tax_rate is not None:
        included_tax = decompose(amount, tax_rate, inclusive, decimal_places).included_tax
    return PlannedAdjustment(
        source=source,
        originator_id=originator_id,
        label=label,
        amount=amount,
        included_tax=included_tax,
        exchange_id=exchange_id,
        canceled=canceled,
    )


def plan_adjustments(
    order: OrderSnapshot,
    settings: RecalculationSettings,
) -> LedgerPlan:
    """
    Price every adjustment ``order`` should carry.

    Args:
        order: Frozen snapshot of the order's current state.
        settings: Tax configuration for this recalculation.

    Returns:
        LedgerPlan holding the shipment, payment and enterprise fee
        adjustments and their total.
    """
    places = settings.decimal_places
    charges_tax = _charges_tax(order.distributor)
    whole_order = OrderTarget(line_items=order.line_items, order_id=order.id)

    shipment = None
    if order.shipping_method is not None:
        method = order.shipping_method
        shipment = _priced(
            AdjustmentSource.SHIPMENT,
            method.id,
            f"Shipping ({method.name})",
            method.calculator,
            whole_order,
            taxable=charges_tax and settings.shipment_inc_vat,
            tax_rate=validate_tax_rate(settings.shipping_tax_rate),
            inclusive=True,
            decimal_places=places,
            canceled=order.is_canceled(AdjustmentSource.SHIPMENT, method.id),
        )

    payment = None
    if order.payment_method is not None:
        method = order.payment_method
        payment = _priced(
            AdjustmentSource.PAYMENT,
            method.id,
            f"Payment fee ({method.name})",
            method.calculator,
            whole_order,
            taxable=charges_tax and settings.payment_inc_vat,
            tax_rate=validate_tax_rate(settings.payment_tax_rate),
            inclusive=True,
            decimal_places=places,
            canceled=order.is_canceled(AdjustmentSource.PAYMENT, method.id),
        )

    distributor_id = order.distributor.id if order.distributor is not None else None
    fees: list[PlannedAdjustment] = []
    for exchange in order.exchanges:
        if not exchange.applies_to(distributor_id):
            continue
        matching = exchange.matching_items(order.line_items)
        for fee in exchange.fees:
            canceled = order.is_canceled(AdjustmentSource.ENTERPRISE_FEE, fee.id, exchange.id)
            if not matching:
                fees.append(
                    PlannedAdjustment(
                        source=AdjustmentSource.ENTERPRISE_FEE,
                        originator_id=fee.id,
                        label=fee.name,
                        amount=ZERO,
                        exchange_id=exchange.id,
                        canceled=canceled,
                    )
                )
                continue
            fees.append(
                _priced(
                    AdjustmentSource.ENTERPRISE_FEE,
                    fee.id,
                    fee.name,
                    fee.calculator,
                    OrderTarget(line_items=matching, order_id=order.id),
                    taxable=charges_tax,
                    tax_rate=fee.tax_rate,
                    inclusive=fee.inclusive_tax,
                    decimal_places=places,
                    exchange_id=exchange.id,
                    canceled=canceled,
                )
            )

    return LedgerPlan(
        order_id=order.id,
        item_total=order.item_total,
        shipment=shipment,
        payment=payment,
        enterprise_fees=tuple(fees),
    )
