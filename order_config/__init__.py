"""
order_config -- single public entrypoint for marketplace configuration.

Responsibility:
    Provides the only way to obtain configuration at runtime through
    ``get_active_config()``. Returns a frozen ``MarketplaceConfig``.

Architecture position:
    Configuration sits above ``order_kernel``. The kernel never imports
    from ``order_config``; ``order_config.bridges`` translates the config
    into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ConfigValidationError`` -- schema failures, all listed at once.

Every successful ``get_active_config()`` call emits an
``ORDER_CONFIG_TRACE`` log entry with the config id, version and checksum.
"""

from __future__ import annotations

from pathlib import Path

from order_config.loader import load_config
from order_config.schema import MarketplaceConfig
from order_config.validator import ConfigValidationError
from order_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "ConfigValidationError",
    "MarketplaceConfig",
    "get_active_config",
]


def get_active_config(path: Path | None = None) -> MarketplaceConfig:
    """
    Load, validate and return the marketplace configuration.

    Args:
        path: Override path to a YAML file. Defaults to
            order_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If validation fails.
    """
    config = load_config(path or _DEFAULT_CONFIG_FILE)

    _logger.info(
        "ORDER_CONFIG_TRACE",
        extra={
            "trace_type": "ORDER_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "currency": config.currency,
            "shipment_inc_vat": config.shipment_inc_vat,
            "payment_inc_vat": config.payment_inc_vat,
        },
    )
    return config
