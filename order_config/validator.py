"""
Configuration Validator (``order_config.validator``).

Responsibility
--------------
Checks a raw configuration mapping before it is turned into a
``MarketplaceConfig``. Every problem is collected so a single run reports
all of them.

Invariants enforced
-------------------
* ``config_id`` and ``currency`` are present; currency is a three letter
  ISO 4217 code.
* ``decimal_places`` is an integer between 0 and 4.
* Tax flags are booleans; tax rates are finite decimals >= 0 written as
  strings or integers. Floats are rejected.
* Unknown top-level and ``tax`` keys are errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from order_kernel.exceptions import ConfigError

_TOP_LEVEL_KEYS = frozenset(
    {"config_id", "version", "currency", "decimal_places", "tax"}
)
_TAX_KEYS = frozenset(
    {"shipment_inc_vat", "shipping_tax_rate", "payment_inc_vat", "payment_tax_rate"}
)


class ConfigValidationError(ConfigError):
    """Configuration failed validation."""

    code: str = "CONFIG_VALIDATION_FAILED"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)


def _check_rate(result: ConfigValidationResult, name: str, value: Any) -> None:
    if isinstance(value, bool) or isinstance(value, float):
        result.add_error(f"tax.{name}: must be a string or integer, got {value!r}")
        return
    try:
        rate = Decimal(str(value))
    except InvalidOperation:
        result.add_error(f"tax.{name}: not a number: {value!r}")
        return
    if not rate.is_finite() or rate < 0:
        result.add_error(f"tax.{name}: must be a finite rate >= 0, got {value!r}")


def validate_raw_config(data: dict[str, Any]) -> ConfigValidationResult:
    """Validate a raw configuration mapping and return every error found."""
    result = ConfigValidationResult()

    for key in sorted(set(data) - _TOP_LEVEL_KEYS):
        result.add_error(f"Unknown key: {key}")

    if not data.get("config_id"):
        result.add_error("config_id: required")

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        result.add_error(f"version: must be a positive integer, got {version!r}")

    currency = data.get("currency")
    if currency is None:
        result.add_error("currency: required")
    elif not (isinstance(currency, str) and len(currency) == 3 and currency.isupper()):
        result.add_error(f"currency: must be an ISO 4217 code, got {currency!r}")

    places = data.get("decimal_places", 2)
    if isinstance(places, bool) or not isinstance(places, int) or not 0 <= places <= 4:
        result.add_error(f"decimal_places: must be an integer 0-4, got {places!r}")

    tax = data.get("tax", {}) or {}
    if not isinstance(tax, dict):
        result.add_error("tax: must be a mapping")
        return result

    for key in sorted(set(tax) - _TAX_KEYS):
        result.add_error(f"Unknown tax key: {key}")
    for flag in ("shipment_inc_vat", "payment_inc_vat"):
        if flag in tax and not isinstance(tax[flag], bool):
            result.add_error(f"tax.{flag}: must be a boolean, got {tax[flag]!r}")
    for rate in ("shipping_tax_rate", "payment_tax_rate"):
        if rate in tax:
            _check_rate(result, rate, tax[rate])

    return result
