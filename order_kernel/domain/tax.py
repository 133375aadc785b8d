"""
Tax -- Decomposition of gross fee amounts into net and included tax.

Responsibility:
    decompose() splits a gross amount charged under a tax rate.  For a
    tax-inclusive fee the tax is carved out of the gross:

        included_tax = gross * rate / (1 + rate)
        net          = gross - included_tax

    A fee that is not tax-inclusive carries no included tax.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Rounding happens exactly once, on included_tax, to the currency's
      smallest unit using ROUND_HALF_EVEN; net is derived by subtraction so
      net + included_tax == gross exactly.
    - included_tax carries the sign of gross and |included_tax| <= |gross|.

Failure modes:
    - InvalidTaxRateError for a negative, non-finite or non-numeric rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from order_kernel.db.types import DEFAULT_DECIMAL_PLACES, ZERO, round_money
from order_kernel.exceptions import InvalidTaxRateError


@dataclass(frozen=True)
class TaxBreakdown:
    """Net and included-tax parts of a gross amount."""

    net: Decimal
    included_tax: Decimal

    @property
    def gross(self) -> Decimal:
        return self.net + self.included_tax


def validate_tax_rate(rate: object) -> Decimal:
    """Return ``rate`` as a Decimal, raising InvalidTaxRateError if unusable."""
    if rate is None or isinstance(rate, (bool, float)):
        raise InvalidTaxRateError(rate)
    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    except InvalidOperation as e:
        raise InvalidTaxRateError(rate) from e
    if not value.is_finite() or value < ZERO:
        raise InvalidTaxRateError(rate)
    return value


def decompose(
    gross_amount: Decimal,
    tax_rate: Decimal | str | int,
    inclusive: bool,
    decimal_places: int = DEFAULT_DECIMAL_PLACES,
) -> TaxBreakdown:
    """
    Split ``gross_amount`` into net and included tax.

    Args:
        gross_amount: The fee amount as charged.
        tax_rate: Rate as a fraction (0.25 for 25%).
        inclusive: Whether ``gross_amount`` already contains the tax.
        decimal_places: Smallest currency unit to round included tax to.

    Returns:
        TaxBreakdown with net + included_tax == gross_amount.

    Raises:
        InvalidTaxRateError: If tax_rate is negative, non-finite or not numeric.
    """
    rate = validate_tax_rate(tax_rate)
    if not inclusive:
        return TaxBreakdown(net=gross_amount, included_tax=ZERO)

    included_tax = round_money(gross_amount * rate / (1 + rate), decimal_places)
    return TaxBreakdown(net=gross_amount - included_tax, included_tax=included_tax)
