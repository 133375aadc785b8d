"""
Config -> Kernel Bridges.

Converts a ``MarketplaceConfig`` into kernel inputs. These live in
order_config because the kernel must never import order_config.

Usage:
    from order_config import get_active_config
    from order_config.bridges import to_recalculation_settings

    settings = to_recalculation_settings(get_active_config())
    LineItemRequests(session, settings).destroy(line_item_id, user_id)
"""

from __future__ import annotations

from order_config.schema import MarketplaceConfig
from order_kernel.domain.dtos import RecalculationSettings


def to_recalculation_settings(config: MarketplaceConfig) -> RecalculationSettings:
    """Build the settings the adjustment ledger recalculates with."""
    return RecalculationSettings(
        shipment_inc_vat=config.shipment_inc_vat,
        shipping_tax_rate=config.shipping_tax_rate,
        payment_inc_vat=config.payment_inc_vat,
        payment_tax_rate=config.payment_tax_rate,
        decimal_places=config.decimal_places,
    )
