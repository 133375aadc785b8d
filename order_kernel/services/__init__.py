"""Services for the order kernel (write side)."""

from order_kernel.services.adjustment_ledger import AdjustmentLedger
from order_kernel.services.line_item_requests import LineItemRequests, RequestResult
from order_kernel.services.line_item_service import LineItemDeletion, LineItemService
from order_kernel.services.order_recalculation import OrderRecalculationOrchestrator

__all__ = [
    "AdjustmentLedger",
    "LineItemDeletion",
    "LineItemRequests",
    "LineItemService",
    "OrderRecalculationOrchestrator",
    "RequestResult",
]
