"""
Pure domain layer for the order kernel.

Zero I/O: calculators, the tax resolver, the ledger planner and the
deletion policy operate on the frozen DTOs in dtos.py.
"""

from order_kernel.domain.calculators import (
    CalculationTarget,
    Calculator,
    CalculatorRegistry,
    LineItemTarget,
    OrderTarget,
    OtherTarget,
    build_calculator,
    compute,
    line_items_for,
)
from order_kernel.domain.deletion_policy import (
    DeletionContext,
    DenialReason,
    PolicyDecision,
    authorize,
)
from order_kernel.domain.dtos import (
    AdjustmentSource,
    CalculatorSpec,
    DistributorData,
    EnterpriseFeeData,
    ExchangeData,
    FeeMethodData,
    LineItemData,
    OrderSnapshot,
    RecalculationSettings,
)
from order_kernel.domain.ledger import LedgerPlan, PlannedAdjustment, plan_adjustments, total
from order_kernel.domain.tax import TaxBreakdown, decompose

__all__ = [
    "AdjustmentSource",
    "CalculationTarget",
    "Calculator",
    "CalculatorRegistry",
    "CalculatorSpec",
    "DeletionContext",
    "DenialReason",
    "DistributorData",
    "EnterpriseFeeData",
    "ExchangeData",
    "FeeMethodData",
    "LedgerPlan",
    "LineItemData",
    "LineItemTarget",
    "OrderSnapshot",
    "OrderTarget",
    "OtherTarget",
    "PlannedAdjustment",
    "PolicyDecision",
    "RecalculationSettings",
    "TaxBreakdown",
    "authorize",
    "build_calculator",
    "compute",
    "decompose",
    "line_items_for",
    "plan_adjustments",
    "total",
]
