"""
MarketplaceConfig schema.

Defines the frozen runtime artifact for marketplace configuration. YAML
files are parsed into this type by the loader and checked by the
validator before anything in the kernel sees them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class MarketplaceConfig:
    """Tax and rounding settings for one marketplace deployment."""

    config_id: str
    version: int
    currency: str
    decimal_places: int = 2
    shipment_inc_vat: bool = False
    shipping_tax_rate: Decimal = Decimal("0")
    payment_inc_vat: bool = False
    payment_tax_rate: Decimal = Decimal("0")
    checksum: str = ""
