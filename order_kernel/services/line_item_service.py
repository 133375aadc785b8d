"""
Service layer for line item removal.

destroy() is the only way a line item leaves an order: it consults the
deletion policy, removes the item, and has the recalculation orchestrator
bring the order's adjustments up to date inside the same transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from order_kernel.domain.deletion_policy import DeletionContext, authorize
from order_kernel.domain.dtos import RecalculationSettings
from order_kernel.exceptions import (
    LineItemDeletionForbiddenError,
    LineItemNotFoundError,
)
from order_kernel.logging_config import get_logger
from order_kernel.models.enterprise import Enterprise
from order_kernel.models.order import LineItem, Order
from order_kernel.services.base import BaseService
from order_kernel.services.order_recalculation import OrderRecalculationOrchestrator

logger = get_logger("services.line_item")


@dataclass(frozen=True)
class LineItemDeletion:
    """Outcome of a successful destroy()."""

    line_item_id: UUID
    order_id: UUID
    adjustment_total: Decimal
    order_total: Decimal


class LineItemService(BaseService[LineItem]):
    """
    Removes line items from orders on behalf of their owners.

    Flush-only: the caller owns the transaction, so a failed recalculation
    also undoes the removal.
    """

    def __init__(self, session: Session, settings: RecalculationSettings):
        super().__init__(session)
        self._orchestrator = OrderRecalculationOrchestrator(
            session, settings, auto_commit=False
        )

    def _get_by_id(self, line_item_id: UUID) -> LineItem:
        """Get line item by ID, raising if not found."""
        line_item = self.session.get(LineItem, line_item_id)
        if line_item is None:
            raise LineItemNotFoundError(str(line_item_id))
        return line_item

    def _lock_order(self, order_id: UUID) -> Order:
        """
        Lock the order row and refresh it and its distributor.

        The distributor row is share-locked so allow_order_changes cannot
        flip between the policy check and the removal.
        """
        self.session.flush()
        order = self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()
        if order.distributor_id is not None:
            self.session.execute(
                select(Enterprise)
                .where(Enterprise.id == order.distributor_id)
                .with_for_update(read=True)
                .execution_options(populate_existing=True)
            ).scalar_one()
        return order

    def destroy(
        self,
        line_item_id: UUID,
        requesting_user_id: UUID | None,
        *,
        current_order_cycle_id: UUID | None = None,
        current_distributor_id: UUID | None = None,
    ) -> LineItemDeletion:
        """
        Remove a line item if the deletion policy allows it.

        The policy reads the order cycle and distributor of the line item's
        own order.  The shop context the request was made in is recorded on
        the emitted events only.

        Args:
            line_item_id: UUID of the line item to remove.
            requesting_user_id: Authenticated user, or None when anonymous.
            current_order_cycle_id: Order cycle the request was made in.
            current_distributor_id: Shop the request was made in.

        Returns:
            LineItemDeletion with the order's recalculated totals.

        Raises:
            LineItemNotFoundError: If the line item doesn't exist.
            LineItemDeletionForbiddenError: If the policy denies the request.
                Nothing has been modified when this is raised.
            ComputationError: If the order cannot be recalculated.
        """
        line_item = self._get_by_id(line_item_id)
        order = self._lock_order(line_item.order_id)
        shop_context = {
            "current_order_cycle_id": str(current_order_cycle_id) if current_order_cycle_id else None,
            "current_distributor_id": str(current_distributor_id) if current_distributor_id else None,
        }

        decision = authorize(requesting_user_id, DeletionContext.from_model(line_item))
        if not decision.allowed:
            logger.warning(
                "line_item_deletion_denied",
                extra={
                    "line_item_id": str(line_item_id),
                    "reason": decision.reason.value,
                    **shop_context,
                },
            )
            raise LineItemDeletionForbiddenError(str(line_item_id), decision.reason.value)

        order.line_items.remove(line_item)
        self.session.flush()

        logger.info(
            "line_item_destroyed",
            extra={"line_item_id": str(line_item_id), "order_id": str(order.id), **shop_context},
        )

        self._orchestrator.on_line_item_removed(order)
        return LineItemDeletion(
            line_item_id=line_item_id,
            order_id=order.id,
            adjustment_total=order.adjustment_total,
            order_total=order.total,
        )
