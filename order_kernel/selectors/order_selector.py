"""
OrderSelector -- read-only views of an order's adjustments and totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from order_kernel.models.adjustment import Adjustment, AdjustmentState, OriginatorType
from order_kernel.models.order import Order
from order_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AdjustmentInfo:
    """Immutable DTO for one adjustment."""

    id: UUID
    originator_type: str
    originator_id: UUID
    exchange_id: UUID | None
    label: str
    amount: Decimal
    included_tax: Decimal
    state: str


@dataclass(frozen=True)
class OrderAdjustmentSummary:
    """An order's totals and the adjustments that make them up."""

    order_id: UUID
    item_total: Decimal
    adjustment_total: Decimal
    total: Decimal
    shipment: AdjustmentInfo | None
    payment: AdjustmentInfo | None
    enterprise_fees: tuple[AdjustmentInfo, ...]

    @property
    def computed_adjustment_total(self) -> Decimal:
        """Sum of the listed non-canceled adjustments."""
        listed = [a for a in (self.shipment, self.payment) if a is not None]
        listed.extend(self.enterprise_fees)
        return sum(
            (a.amount for a in listed if a.state != AdjustmentState.CANCELED.value),
            Decimal("0"),
        )


class OrderSelector(BaseSelector[Order]):
    """Selector for order totals and adjustments."""

    @staticmethod
    def _to_dto(adjustment: Adjustment) -> AdjustmentInfo:
        return AdjustmentInfo(
            id=adjustment.id,
            originator_type=OriginatorType(adjustment.originator_type).value,
            originator_id=adjustment.originator_id,
            exchange_id=adjustment.exchange_id,
            label=adjustment.label,
            amount=adjustment.amount,
            included_tax=adjustment.included_tax,
            state=AdjustmentState(adjustment.state).value,
        )

    def exists(self, order_id: UUID) -> bool:
        """Check whether an order exists."""
        return self.session.execute(
            select(Order.id).where(Order.id == order_id)
        ).first() is not None

    def adjustment_summary(self, order_id: UUID) -> OrderAdjustmentSummary | None:
        """
        Summarise an order's adjustments.

        Returns:
            OrderAdjustmentSummary, or None if the order does not exist.
        """
        order = self.session.get(Order, order_id)
        if order is None:
            return None

        by_type: dict[str, list[AdjustmentInfo]] = {t.value: [] for t in OriginatorType}
        for adjustment in order.adjustments:
            info = self._to_dto(adjustment)
            by_type[info.originator_type].append(info)

        shipments = by_type[OriginatorType.SHIPPING_METHOD.value]
        payments = by_type[OriginatorType.PAYMENT_METHOD.value]
        return OrderAdjustmentSummary(
            order_id=order.id,
            item_total=order.item_total,
            adjustment_total=order.adjustment_total,
            total=order.total,
            shipment=shipments[0] if shipments else None,
            payment=payments[0] if payments else None,
            enterprise_fees=tuple(by_type[OriginatorType.ENTERPRISE_FEE.value]),
        )
