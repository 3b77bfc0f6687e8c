"""Decimal helpers for amounts handled by the pricing engine.

Aggregates store amounts as floats; every calculation converts them to
``Decimal`` first and rounds half-up to whole paisa only at the points
where a figure is reported.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")
GRAM = Decimal("0.001")


def to_decimal(value, default: Decimal | None = ZERO) -> Decimal | None:
    """Best-effort conversion of ints, floats, strings and Decimals.

    Returns ``default`` for ``None``, blanks, and anything that does not parse
    to a finite number.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def round_money(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def round_weight(weight) -> Decimal:
    return to_decimal(weight).quantize(GRAM, rounding=ROUND_HALF_UP)


def format_money(amount) -> str:
    """Two-decimal string used in API responses, e.g. ``"1250.00"``."""
    return f"{round_money(amount):.2f}"
