"""
Decimal helpers for monetary comparisons

Invoice amounts arrive as fixed-point strings. Upstream schema validation is
not our concern here, so parsing is tolerant: anything unparsable counts as 0.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

# Absorbs rounding differences of one sen
DEFAULT_TOLERANCE = Decimal("0.01")

CENT = Decimal("0.01")

# Parsed magnitudes beyond 10**100 count as unparsable so products stay inside the context range
MAX_EXPONENT = 100

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """Parse a decimal-ish value, returning Decimal('0') instead of raising"""
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")

    if isinstance(value, float):
        value = repr(value)

    text = str(value).strip().replace(",", "")
    if not text:
        return Decimal("0")

    try:
        parsed = Decimal(text)
    except (InvalidOperation, ValueError):
        return Decimal("0")

    # NaN / Infinity cannot be compared meaningfully
    if not parsed.is_finite():
        return Decimal("0")
    if parsed and abs(parsed.adjusted()) > MAX_EXPONENT:
        return Decimal("0")
    return parsed


def within_tolerance(actual: Number, expected: Number, tolerance: Number = DEFAULT_TOLERANCE) -> bool:
    """True when |actual - expected| <= tolerance"""
    return abs(to_decimal(actual) - to_decimal(expected)) <= to_decimal(tolerance)


def quantize_money(value: Number) -> Decimal:
    """Round to 2 decimal places, half-up (sen)"""
    amount = to_decimal(value)
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context precision holds; already whole sen
        return amount


def format_money(value: Number) -> str:
    return f"{quantize_money(value):,.2f}"
