"""
Configuration Loader (``order_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a
``MarketplaceConfig``. Runtime callers go through
``order_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or malformed keys  -> ``ConfigValidationError`` listing every
  problem found.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from order_config.schema import MarketplaceConfig
from order_config.validator import ConfigValidationError, validate_raw_config
from order_kernel.db.types import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigValidationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError([f"{path}: top level must be a mapping"])
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of the raw config."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> MarketplaceConfig:
    """
    Validate a raw config dict and build a ``MarketplaceConfig``.

    Raises:
        ConfigValidationError: if any field is missing or malformed.
    """
    result = validate_raw_config(data)
    if not result.is_valid:
        raise ConfigValidationError(result.errors)

    tax = data.get("tax", {}) or {}
    return MarketplaceConfig(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        currency=str(data["currency"]),
        decimal_places=int(data.get("decimal_places", 2)),
        shipment_inc_vat=bool(tax.get("shipment_inc_vat", False)),
        shipping_tax_rate=to_decimal(tax.get("shipping_tax_rate", "0")),
        payment_inc_vat=bool(tax.get("payment_inc_vat", False)),
        payment_tax_rate=to_decimal(tax.get("payment_tax_rate", "0")),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> MarketplaceConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(path))
