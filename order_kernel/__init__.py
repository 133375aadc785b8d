"""
Order Kernel

Adjustment recalculation for multi-vendor food distribution orders:
- Fee calculators and tax-inclusive decomposition
- An adjustment ledger kept consistent with the order's line items
- A deletion policy gating line item removal
- Synchronous, all-or-nothing recalculation after every removal
"""

__version__ = "0.1.0"
