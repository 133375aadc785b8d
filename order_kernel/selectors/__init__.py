"""Selectors for the order kernel (read side)."""

from order_kernel.selectors.line_item_selector import LineItemInfo, LineItemSelector
from order_kernel.selectors.order_selector import (
    AdjustmentInfo,
    OrderAdjustmentSummary,
    OrderSelector,
)

__all__ = [
    "AdjustmentInfo",
    "LineItemInfo",
    "LineItemSelector",
    "OrderAdjustmentSummary",
    "OrderSelector",
]
