"""
LineItemSelector -- read-only line item queries.

find() and exists() are the existence contract for line items: a deleted
line item yields None / False rather than an exception.
list_bought_items() returns what a customer has already bought from a shop
in the current order cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from order_kernel.models.order import LineItem, Order, OrderState
from order_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LineItemInfo:
    """Immutable DTO for line item data."""

    id: UUID
    order_id: UUID
    variant_id: UUID
    quantity: int
    price: Decimal

    def to_dict(self) -> dict[str, str | int]:
        return {
            "id": str(self.id),
            "order_id": str(self.order_id),
            "variant_id": str(self.variant_id),
            "quantity": self.quantity,
            "price": str(self.price),
        }


class LineItemSelector(BaseSelector[LineItem]):
    """Selector for line item queries."""

    def _to_dto(self, line_item: LineItem) -> LineItemInfo:
        return LineItemInfo(
            id=line_item.id,
            order_id=line_item.order_id,
            variant_id=line_item.variant_id,
            quantity=line_item.quantity,
            price=line_item.price,
        )

    def find(self, line_item_id: UUID) -> LineItemInfo | None:
        """
        Find a line item by ID.

        Returns:
            LineItemInfo DTO, or None if no such line item exists.
        """
        line_item = self.session.execute(
            select(LineItem).where(LineItem.id == line_item_id)
        ).scalar_one_or_none()
        return self._to_dto(line_item) if line_item else None

    def exists(self, line_item_id: UUID) -> bool:
        """Check whether a line item exists."""
        stmt = select(LineItem.id).where(LineItem.id == line_item_id)
        return self.session.execute(stmt).first() is not None

    def list_bought_items(
        self,
        user_id: UUID,
        distributor_id: UUID | None,
        order_cycle_id: UUID | None,
    ) -> list[LineItemInfo]:
        """
        Line items of the user's completed orders with one distributor in one
        order cycle.

        Orders are returned oldest completion first; within an order, line
        items keep the order's own sequence.

        Args:
            user_id: The customer.
            distributor_id: Current shop.  None matches nothing.
            order_cycle_id: Current order cycle.  None matches nothing.

        Returns:
            List of LineItemInfo DTOs.
        """
        if distributor_id is None or order_cycle_id is None:
            return []

        stmt = (
            select(LineItem)
            .join(Order, LineItem.order_id == Order.id)
            .where(Order.user_id == user_id)
            .where(Order.distributor_id == distributor_id)
            .where(Order.order_cycle_id == order_cycle_id)
            .where(Order.state == OrderState.COMPLETE.value)
            .order_by(Order.completed_at, Order.id, LineItem.position)
        )
        line_items = self.session.execute(stmt).scalars().all()
        return [self._to_dto(li) for li in line_items]
