"""Tests for the tax and shipping calculations of the pricing engine."""

from decimal import Decimal

from marketplace.pricing.models import PricedLine, ShippingRate, TaxRate
from marketplace.pricing.shipping import DEFAULT_CARRIER, compute_shipping, line_weight
from marketplace.pricing.tax import compute_tax, global_tax_rate


def _line(product_id="p1", quantity=2, unit_price="1000", **kwargs):
    return PricedLine(product_id=product_id, quantity=quantity, unit_price=Decimal(unit_price), **kwargs)


class TestGlobalTaxRate:
    def test_highest_priority_general_rule_wins(self):
        rules = [
            TaxRate(rate=Decimal("17"), priority=1),
            TaxRate(rate=Decimal("18"), priority=5),
            TaxRate(rate=Decimal("25"), priority=9, province="Punjab"),
        ]
        assert global_tax_rate(rules) == Decimal("18")

    def test_falls_back_to_any_usable_rule(self):
        rules = [TaxRate(rate=Decimal("16"), province="Sindh", category="handicrafts")]
        assert global_tax_rate(rules) == Decimal("16")

    def test_disabled_and_exempt_rules_are_ignored(self):
        rules = [TaxRate(rate=Decimal("17"), enabled=False), TaxRate(rate=Decimal("5"), exempt=True)]
        assert global_tax_rate(rules) == Decimal("0")

    def test_negative_rate_means_no_tax(self):
        assert global_tax_rate([TaxRate(rate=Decimal("-3"))]) == Decimal("0")


class TestComputeTax:
    def test_global_rate_applies_to_each_line(self):
        result = compute_tax([_line(), _line("p2", 1, "500")], [TaxRate(rate=Decimal("17"))])
        assert result.amount == Decimal("425.00")
        assert [line.tax for line in result.breakdown] == [Decimal("340.00"), Decimal("85.00")]

    def test_variant_rate_overrides_global_rate(self):
        result = compute_tax([_line(variant_tax_rate=Decimal("5"))], [TaxRate(rate=Decimal("17"))])
        assert result.amount == Decimal("100.00")
        assert result.breakdown[0].rate == Decimal("5")

    def test_exempt_line_pays_nothing(self):
        result = compute_tax([_line(tax_exempt=True)], [TaxRate(rate=Decimal("17"))])
        assert result.amount == Decimal("0.00")

    def test_tax_disabled(self):
        result = compute_tax([_line()], [TaxRate(rate=Decimal("17"))], tax_enabled=False)
        assert result.amount == Decimal("0")
        assert result.breakdown[0].tax == Decimal("0")


class TestShipping:
    def _rule(self, **kwargs):
        defaults = {
            "carrier": "leopards",
            "min_weight_kg": Decimal("0"),
            "max_weight_kg": Decimal("5"),
            "base_rate": Decimal("250"),
            "per_kg_rate": Decimal("50"),
        }
        defaults.update(kwargs)
        return ShippingRate(**defaults)

    def test_weight_band_rate(self):
        quote = compute_shipping([_line(weight_kg=Decimal("1.5"))], [self._rule()])
        assert quote.total_weight_kg == Decimal("3.000")
        assert quote.amount == Decimal("400.00")
        assert quote.carrier == "leopards"
        assert quote.method == "standard"

    def test_surcharge_is_added(self):
        quote = compute_shipping([_line(weight_kg=Decimal("1"))], [self._rule(surcharge=Decimal("30"))])
        assert quote.amount == Decimal("380.00")

    def test_dimensional_weight_used_when_heavier(self):
        line = _line(
            quantity=1,
            weight_kg=Decimal("0.5"),
            length_cm=Decimal("50"),
            width_cm=Decimal("40"),
            height_cm=Decimal("30"),
        )
        weight = line_weight(line, Decimal("5000"))
        assert weight.weight_kg == Decimal("12")

    def test_heaviest_band_falls_back_to_top_priority_rule(self):
        rules = [
            self._rule(max_weight_kg=Decimal("5"), priority=1),
            self._rule(carrier="tcs", max_weight_kg=Decimal("10"), base_rate=Decimal("600"), priority=2),
        ]
        quote = compute_shipping([_line(quantity=1, weight_kg=Decimal("25"))], rules)
        assert quote.carrier == "tcs"

    def test_method_must_match(self):
        quote = compute_shipping([_line(weight_kg=Decimal("1"))], [self._rule()], method="Express")
        assert quote.amount == Decimal("0")
        assert quote.carrier == DEFAULT_CARRIER
        assert quote.method == "express"

    def test_shipping_disabled(self):
        quote = compute_shipping([_line(weight_kg=Decimal("1"))], [self._rule()], shipping_enabled=False)
        assert quote.amount == Decimal("0")
        assert quote.breakdown[0].weight_kg == Decimal("0")

    def test_disabled_rule_is_skipped(self):
        quote = compute_shipping([_line(weight_kg=Decimal("1"))], [self._rule(enabled=False)])
        assert quote.amount == Decimal("0")
