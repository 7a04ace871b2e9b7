"""Monetary amounts.

Prices are stored as integer minor units (fen) of a single fixed currency
and only become decimals at the HTTP boundary:

    Decimal("125.00") -> to_minor_units -> 12500 -> from_minor_units -> Decimal("125.00")

MINOR_UNIT_SCALE is the one place the scale lives; both the write path
(services) and the read path (response schemas) go through this module.
"""

from decimal import Decimal, InvalidOperation

CURRENCY = "CNY"
MINOR_UNIT_SCALE = 100
FRACTION_DIGITS = 2

# Prices live in a signed 64-bit column
MAX_MINOR_UNITS = 2**63 - 1
MAX_AMOUNT = Decimal(MAX_MINOR_UNITS) / MINOR_UNIT_SCALE  # Decimal("92233720368547758.07")

_QUANTUM = Decimal(1).scaleb(-FRACTION_DIGITS)  # Decimal("0.01")


class InvalidAmountError(ValueError):
    """Raised when a raw value cannot be read as a non-negative amount."""


def parse_amount(raw: object) -> Decimal:
    """Parse a client-supplied price into a Decimal amount.

    Accepts decimal strings, ints and Decimals. Floats are converted through
    their shortest repr so 150.0 reads as 150.0 rather than a binary
    approximation. Rejects booleans, non-finite values, negatives, amounts
    above MAX_AMOUNT and amounts with more fraction digits than the currency
    has.
    """
    if isinstance(raw, bool):
        raise InvalidAmountError(f"not an amount: {raw!r}")
    if isinstance(raw, float):
        raw = repr(raw)
    if isinstance(raw, str):
        raw = raw.strip()
    if not isinstance(raw, (str, int, Decimal)):
        raise InvalidAmountError(f"not an amount: {raw!r}")

    try:
        amount = Decimal(raw)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"not an amount: {raw!r}") from exc

    if not amount.is_finite():
        raise InvalidAmountError(f"not an amount: {raw!r}")
    if amount < 0:
        raise InvalidAmountError(f"negative amount: {amount}")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(f"amount above {MAX_AMOUNT}: {amount}")
    if amount != amount.quantize(_QUANTUM):
        raise InvalidAmountError(f"more than {FRACTION_DIGITS} fraction digits: {amount}")
    return amount


def to_minor_units(amount: Decimal) -> int:
    """Convert a validated amount to integer minor units."""
    return int(amount.quantize(_QUANTUM) * MINOR_UNIT_SCALE)


def from_minor_units(minor: int) -> Decimal:
    """Convert stored minor units back to a two-digit decimal amount."""
    return (Decimal(minor) / MINOR_UNIT_SCALE).quantize(_QUANTUM)
