"""
OrderRecalculationOrchestrator -- recalculates an order after it changes.

Responsibility:
    Top-level entry point invoked after a line-item mutation or a change to
    the order's distribution context.  It takes an exclusive lock on the
    order row, reloads the current line items, runs the AdjustmentLedger
    and persists the new adjustment amounts and totals.

Architecture position:
    Kernel > Services -- imperative shell.  Defines its own transaction
    boundary when auto_commit=True; flush-only otherwise.

Invariants enforced:
    - Exclusive access: SELECT ... FOR UPDATE on the order row for the
      duration of the recalculation, so no other mutation of the same order
      interleaves.
    - All-or-nothing: the ledger plans every amount before writing; on any
      failure the transaction is rolled back (auto_commit=True) or the
      exception propagates to the transaction owner (auto_commit=False).
    - Synchronous: recalculation finishes before the caller returns.

Failure modes:
    - OrderNotFoundError if the order no longer exists.
    - ComputationError subclasses for malformed calculator or tax settings.
"""

from __future__ import annotations

import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from order_kernel.domain.dtos import RecalculationSettings
from order_kernel.domain.ledger import LedgerPlan
from order_kernel.exceptions import OrderNotFoundError
from order_kernel.logging_config import LogContext, get_logger
from order_kernel.models.order import Order
from order_kernel.services.adjustment_ledger import AdjustmentLedger

logger = get_logger("services.order_recalculation")


class OrderRecalculationOrchestrator:
    """
    Coordinates locking, ledger recalculation and persistence for one order.

    By default each call commits on success and rolls back on failure.
    Construct with auto_commit=False to run inside a caller-owned
    transaction (as LineItemService does, so that removal and
    recalculation commit together).
    """

    def __init__(
        self,
        session: Session,
        settings: RecalculationSettings,
        auto_commit: bool = True,
    ):
        self._session = session
        self._auto_commit = auto_commit
        self._ledger = AdjustmentLedger(session, settings)

    @property
    def ledger(self) -> AdjustmentLedger:
        return self._ledger

    def on_line_item_removed(self, order: Order) -> LedgerPlan:
        """Recalculate ``order`` after one of its line items was destroyed."""
        return self._run(order, trigger="line_item_removed")

    def recalculate(self, order: Order) -> LedgerPlan:
        """Recalculate ``order`` after its distribution context changed."""
        return self._run(order, trigger="distribution_changed")

    def _run(self, order: Order, trigger: str) -> LedgerPlan:
        with LogContext.bind(order_id=str(order.id)):
            t0 = time.monotonic()
            try:
                locked = self._lock_order(order)
                plan = self._ledger.recalculate(locked)

                if self._auto_commit:
                    self._session.commit()

                logger.info(
                    "order_recalculated",
                    extra={
                        "trigger": trigger,
                        "line_item_count": len(locked.line_items),
                        "adjustment_total": locked.adjustment_total,
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    },
                )
                return plan

            except Exception:
                if self._auto_commit:
                    self._session.rollback()
                logger.error(
                    "order_recalculation_failed",
                    extra={"trigger": trigger},
                    exc_info=True,
                )
                raise

    def _lock_order(self, order: Order) -> Order:
        """Lock the order row and reload its line items."""
        order_id = order.id
        self._session.flush()
        locked = self._session.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if locked is None:
            raise OrderNotFoundError(str(order_id))
        self._session.expire(locked, ["line_items", "adjustments"])
        return locked
