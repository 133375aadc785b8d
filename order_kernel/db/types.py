"""
Module: order_kernel.db.types
Responsibility: Decimal coercion and the sanctioned rounding helper for
    monetary values.
Architecture position: Kernel > DB.  Imported by models/ and domain/.

Invariants enforced:
    - Monetary amounts are Decimal, never float.
    - round_money() is the only rounding function for fee and tax amounts.
      It defaults to banker's rounding (ROUND_HALF_EVEN) so that repeated
      recalculations do not drift upward.
"""

from decimal import ROUND_HALF_EVEN, Decimal

# Rounding constants
DEFAULT_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_EVEN

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """Coerce an int, str or Decimal to Decimal without passing through float."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(
    value: Decimal,
    decimal_places: int = DEFAULT_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the smallest currency unit.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized to decimal_places using the
        rounding mode (default: ROUND_HALF_EVEN).

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode.

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)
