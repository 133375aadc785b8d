"""
DeletionPolicy -- Who may remove a line item from an order.

Responsibility:
    authorize() evaluates an ordered decision table against a
    DeletionContext; the first rule that matches wins:

        1. no authenticated user                      -> deny NO_USER
        2. order has no order cycle                   -> deny NO_ORDER_CYCLE
        3. user is not the order's owner              -> deny NOT_OWNER
        4. order completed and distributor does not
           allow order changes                        -> deny CHANGES_NOT_ALLOWED
        5. otherwise                                  -> allow

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The service layer
    builds the DeletionContext and acts on the decision.

Invariants enforced:
    - authorize() never mutates anything; a denial is side-effect free by
      construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from order_kernel.domain.dtos import DistributorData

if TYPE_CHECKING:
    from order_kernel.models.order import LineItem as LineItemModel


class DenialReason(str, Enum):
    NO_USER = "no_user"
    NO_ORDER_CYCLE = "no_order_cycle"
    NOT_OWNER = "not_owner"
    CHANGES_NOT_ALLOWED = "changes_not_allowed"


@dataclass(frozen=True)
class DeletionContext:
    """The facts about a line item's order that the policy reads."""

    line_item_id: UUID
    order_id: UUID
    order_owner_id: UUID | None
    order_cycle_id: UUID | None
    order_completed: bool
    distributor: DistributorData | None

    @classmethod
    def from_model(cls, line_item: LineItemModel) -> DeletionContext:
        order = line_item.order
        return cls(
            line_item_id=line_item.id,
            order_id=order.id,
            order_owner_id=order.user_id,
            order_cycle_id=order.order_cycle_id,
            order_completed=order.is_completed,
            distributor=(
                DistributorData.from_model(order.distributor)
                if order.distributor is not None
                else None
            ),
        )


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: DenialReason | None = None

    @classmethod
    def allow(cls) -> PolicyDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> PolicyDecision:
        return cls(allowed=False, reason=reason)


def authorize(requesting_user_id: UUID | None, context: DeletionContext) -> PolicyDecision:
    """Decide whether ``requesting_user_id`` may delete the line item."""
    if requesting_user_id is None:
        return PolicyDecision.deny(DenialReason.NO_USER)
    if context.order_cycle_id is None:
        return PolicyDecision.deny(DenialReason.NO_ORDER_CYCLE)
    if context.order_owner_id != requesting_user_id:
        return PolicyDecision.deny(DenialReason.NOT_OWNER)
    if context.order_completed:
        changes_allowed = (
            context.distributor is not None and context.distributor.allow_order_changes
        )
        if not changes_allowed:
            return PolicyDecision.deny(DenialReason.CHANGES_NOT_ALLOWED)
    return PolicyDecision.allow()
