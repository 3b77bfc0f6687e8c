"""Sales tax for a set of priced lines.

A single platform-wide rate applies to every line unless the line's variant
carries its own rate. Exempt lines and lines worth nothing pay no tax.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from marketplace.pricing.models import PricedLine, TaxLine, TaxRate, TaxResult
from marketplace.pricing.money import ZERO, round_money, to_decimal

GENERAL_CATEGORY = "general"


def _by_priority(rules: Iterable[TaxRate]) -> list[TaxRate]:
    return sorted(rules, key=lambda r: -(r.priority or 0))


def global_tax_rate(rules: Sequence[TaxRate]) -> Decimal:
    """Pick the platform-wide rate.

    General, province-less rules are preferred; when none exist any enabled,
    non-exempt rule qualifies. The highest priority wins and non-positive
    rates count as no tax.
    """
    usable = [r for r in rules if r.enabled and not r.exempt]
    general = [
        r for r in usable if (not r.category or str(r.category).lower() == GENERAL_CATEGORY) and not r.province
    ]
    candidates = _by_priority(general or usable)
    if not candidates:
        return ZERO

    rate = to_decimal(candidates[0].rate)
    return rate if rate > 0 else ZERO


def compute_tax(lines: Sequence[PricedLine], rules: Sequence[TaxRate], tax_enabled: bool = True) -> TaxResult:
    if not tax_enabled:
        return TaxResult(
            amount=ZERO,
            breakdown=tuple(TaxLine(product_id=line.product_id, rate=ZERO, tax=ZERO) for line in lines),
        )

    global_rate = global_tax_rate(rules)

    total = ZERO
    breakdown = []
    for line in lines:
        line_total = line.line_total
        override = to_decimal(line.variant_tax_rate, default=None)
        rate = override if override is not None and override >= 0 else global_rate

        tax = ZERO
        if not line.tax_exempt and line_total > 0 and rate > 0:
            tax = rate / 100 * line_total

        total += tax
        breakdown.append(TaxLine(product_id=line.product_id, rate=rate, tax=round_money(tax)))

    return TaxResult(amount=round_money(total), breakdown=tuple(breakdown))
