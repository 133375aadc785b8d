"""
AdjustmentLedger -- applies ledger plans to an order's persisted adjustments.

Responsibility:
    recalculate() snapshots an order, asks the pure planner for the
    adjustments it should carry, and rewrites the order's Adjustment rows
    and totals to match.  total() sums the order's non-canceled
    adjustments.

Architecture position:
    Kernel > Services -- imperative shell around domain/ledger.py.
    Flush-only: the caller owns the transaction.

Invariants enforced:
    - The plan is computed in full before any row is touched; if pricing
      raises, no adjustment has changed.
    - Shipping and payment fee adjustments hang off the order's shipment
      and payment; enterprise fee adjustments are keyed by (fee, exchange).
    - An enterprise fee adjustment whose exchange still applies but has no
      matching line items is kept at exactly zero.  One whose exchange no
      longer applies to the order is removed.
    - order.adjustment_total == total(order) after every recalculation.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from order_kernel.db.types import ZERO
from order_kernel.domain.dtos import OrderSnapshot, RecalculationSettings
from order_kernel.domain.ledger import LedgerPlan, PlannedAdjustment, plan_adjustments
from order_kernel.logging_config import get_logger
from order_kernel.models.adjustment import Adjustment, AdjustmentState, OriginatorType
from order_kernel.models.order import Order
from order_kernel.services.base import BaseService

logger = get_logger("services.adjustment_ledger")


class AdjustmentLedger(BaseService[Adjustment]):
    """Owns the set of adjustments attached to an order."""

    def __init__(self, session: Session, settings: RecalculationSettings):
        super().__init__(session)
        self.settings = settings

    def plan(self, order: Order) -> LedgerPlan:
        """Price the adjustments ``order`` should carry, without applying them."""
        return plan_adjustments(OrderSnapshot.from_model(order), self.settings)

    def recalculate(self, order: Order) -> LedgerPlan:
        """
        Bring the order's adjustments and totals in line with its current state.

        Raises:
            ComputationError: If a calculator or tax rate is malformed.
                Nothing has been modified when this is raised.
        """
        plan = self.plan(order)
        self.apply(order, plan)
        return plan

    def apply(self, order: Order, plan: LedgerPlan) -> None:
        """Write ``plan`` onto the order's Adjustment rows and totals."""
        if order.shipment is not None and plan.shipment is not None:
            adjustment = order.shipment.adjustment
            if adjustment is None:
                adjustment = Adjustment(
                    order=order,
                    shipment=order.shipment,
                    originator_type=OriginatorType.SHIPPING_METHOD,
                    originator_id=plan.shipment.originator_id,
                )
                self.session.add(adjustment)
            self._write(adjustment, plan.shipment)

        if order.payment is not None and plan.payment is not None:
            adjustment = order.payment.adjustment
            if adjustment is None:
                adjustment = Adjustment(
                    order=order,
                    payment=order.payment,
                    originator_type=OriginatorType.PAYMENT_METHOD,
                    originator_id=plan.payment.originator_id,
                )
                self.session.add(adjustment)
            self._write(adjustment, plan.payment)

        existing: dict[tuple[UUID, UUID | None], Adjustment] = {
            (adj.originator_id, adj.exchange_id): adj
            for adj in order.adjustments
            if adj.originator_type == OriginatorType.ENTERPRISE_FEE
        }
        for planned in plan.enterprise_fees:
            adjustment = existing.pop((planned.originator_id, planned.exchange_id), None)
            if adjustment is None:
                adjustment = Adjustment(
                    order=order,
                    exchange_id=planned.exchange_id,
                    originator_type=OriginatorType.ENTERPRISE_FEE,
                    originator_id=planned.originator_id,
                )
                self.session.add(adjustment)
            self._write(adjustment, planned)

        for stale in existing.values():
            order.adjustments.remove(stale)

        order.item_total = plan.item_total
        order.adjustment_total = self.total(order)
        order.total = order.item_total + order.adjustment_total
        self.session.flush()

        logger.debug(
            "ledger_applied",
            extra={
                "order_id": str(order.id),
                "adjustment_count": len(plan.adjustments),
                "removed_count": len(existing),
                "adjustment_total": order.adjustment_total,
            },
        )

    def total(self, order: Order) -> Decimal:
        """Sum of the order's non-canceled adjustment amounts."""
        return sum(
            (adj.amount for adj in order.adjustments if adj.state != AdjustmentState.CANCELED),
            ZERO,
        )

    @staticmethod
    def _write(adjustment: Adjustment, planned: PlannedAdjustment) -> None:
        adjustment.originator_id = planned.originator_id
        adjustment.label = planned.label
        adjustment.amount = planned.amount
        adjustment.included_tax = planned.included_tax
