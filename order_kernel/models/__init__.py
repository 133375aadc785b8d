"""Domain models for the order kernel."""

from order_kernel.models.adjustment import Adjustment, AdjustmentState, OriginatorType
from order_kernel.models.catalog import Product, Variant
from order_kernel.models.enterprise import Enterprise, User
from order_kernel.models.fees import (
    EnterpriseFee,
    EnterpriseFeeType,
    PaymentMethod,
    ShippingMethod,
)
from order_kernel.models.order import (
    ORDER_STATE_SEQUENCE,
    LineItem,
    Order,
    OrderState,
    Payment,
    Shipment,
)
from order_kernel.models.order_cycle import Exchange, OrderCycle

__all__ = [
    "Adjustment",
    "AdjustmentState",
    "OriginatorType",
    "Product",
    "Variant",
    "Enterprise",
    "User",
    "EnterpriseFee",
    "EnterpriseFeeType",
    "PaymentMethod",
    "ShippingMethod",
    "LineItem",
    "Order",
    "OrderState",
    "ORDER_STATE_SEQUENCE",
    "Payment",
    "Shipment",
    "Exchange",
    "OrderCycle",
]
