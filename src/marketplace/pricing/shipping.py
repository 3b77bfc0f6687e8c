"""Shipping charge from weight-banded carrier rules.

Each line weighs the greater of its actual and dimensional weight; the total
picks the first rule whose band contains it, falling back to the
highest-priority rule for the requested method.
"""

from collections.abc import Sequence

from marketplace.pricing.models import PricedLine, ShippingLine, ShippingQuote, ShippingRate
from marketplace.pricing.money import ZERO, round_money, round_weight, to_decimal

DEFAULT_CARRIER = "internal"
DEFAULT_METHOD = "standard"
DEFAULT_ZONE = "PK"


def normalize_method(method: str | None) -> str:
    return (method or DEFAULT_METHOD).strip().lower() or DEFAULT_METHOD


def active_rules(rules: Sequence[ShippingRate], method: str, zone: str = DEFAULT_ZONE) -> list[ShippingRate]:
    """Enabled rules for ``method`` and ``zone``, highest priority first."""
    matching = [
        r
        for r in rules
        if r.enabled and str(r.method or "").lower() == method and str(r.zone or "").upper() == zone.upper()
    ]
    return sorted(matching, key=lambda r: -(r.priority or 0))


def line_weight(line: PricedLine, dimensional_factor) -> ShippingLine:
    actual = to_decimal(line.weight_kg) * line.quantity

    dimensional = ZERO
    length, width, height = (to_decimal(v) for v in (line.length_cm, line.width_cm, line.height_cm))
    factor = to_decimal(dimensional_factor)
    if length and width and height and factor > 0:
        dimensional = length * width * height / factor

    return ShippingLine(product_id=line.product_id, weight_kg=max(actual, dimensional))


def compute_shipping(
    lines: Sequence[PricedLine],
    rules: Sequence[ShippingRate],
    method: str | None = None,
    shipping_enabled: bool = True,
    zone: str = DEFAULT_ZONE,
) -> ShippingQuote:
    method = normalize_method(method)

    if not shipping_enabled:
        return ShippingQuote(
            amount=ZERO,
            carrier=DEFAULT_CARRIER,
            method=method,
            breakdown=tuple(ShippingLine(product_id=line.product_id, weight_kg=ZERO) for line in lines),
        )

    candidates = active_rules(rules, method, zone)
    factor = candidates[0].dimensional_factor if candidates else None

    weights = [line_weight(line, factor) for line in lines]
    total_weight = sum((w.weight_kg for w in weights), ZERO)
    breakdown = tuple(ShippingLine(product_id=w.product_id, weight_kg=round_weight(w.weight_kg)) for w in weights)

    rule = next(
        (
            r
            for r in candidates
            if to_decimal(r.min_weight_kg) <= total_weight <= to_decimal(r.max_weight_kg)
        ),
        candidates[0] if candidates else None,
    )
    if rule is None:
        return ShippingQuote(
            amount=ZERO,
            carrier=DEFAULT_CARRIER,
            method=method,
            total_weight_kg=round_weight(total_weight),
            breakdown=breakdown,
        )

    amount = to_decimal(rule.base_rate) + to_decimal(rule.per_kg_rate) * total_weight + to_decimal(rule.surcharge)
    return ShippingQuote(
        amount=round_money(amount),
        carrier=rule.carrier or DEFAULT_CARRIER,
        method=method,
        total_weight_kg=round_weight(total_weight),
        breakdown=breakdown,
    )
