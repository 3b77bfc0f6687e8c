"""Tests for vendor offer resolution and the platform promotion engine."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from marketplace.pricing.models import (
    OfferTerms,
    PricedLine,
    PromotionActionTerms,
    PromotionRuleTerms,
    PromotionTerms,
)
from marketplace.pricing.offers import best_offer_price, discounted_price, offer_applies, offer_is_live
from marketplace.pricing.promotions import CartContext, PromotionEngine

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _offer(offer_id="o1", discount_type="percentage", value="10", **kwargs):
    kwargs.setdefault("scope_products", ("p1",))
    return OfferTerms(offer_id=offer_id, discount_type=discount_type, discount_value=Decimal(value), **kwargs)


class TestDiscountedPrice:
    def test_percentage(self):
        assert discounted_price(Decimal("1000"), "percentage", "15") == Decimal("850")

    def test_fixed(self):
        assert discounted_price(Decimal("1000"), "fixed", "250") == Decimal("750")

    def test_never_below_zero(self):
        assert discounted_price(Decimal("1000"), "fixed", "1500") == Decimal("0")

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            discounted_price(Decimal("1000"), "bogo", "1")


class TestOfferScope:
    def test_all_scope(self):
        assert offer_applies(_offer(scope_type="all", scope_products=()), "anything")

    def test_product_scope(self):
        offer = _offer()
        assert offer_applies(offer, "p1")
        assert not offer_applies(offer, "p2")

    def test_category_scope(self):
        offer = _offer(scope_type="categories", scope_products=(), scope_categories=("c1",))
        assert offer_applies(offer, "p9", category_id="c1")
        assert not offer_applies(offer, "p9")

    def test_variant_scope(self):
        offer = _offer(scope_type="variants", scope_products=(), scope_variants=("CHAPPAL-42",))
        assert offer_applies(offer, "p1", variant_sku="CHAPPAL-42")
        assert not offer_applies(offer, "p1", variant_sku="CHAPPAL-44")

    def test_live_window(self):
        assert offer_is_live(_offer(start_at=NOW - timedelta(days=1), end_at=NOW + timedelta(days=1)), NOW)
        assert not offer_is_live(_offer(end_at=NOW - timedelta(seconds=1)), NOW)
        assert not offer_is_live(_offer(is_active=False), NOW)


class TestBestOfferPrice:
    def test_lowest_price_wins(self):
        offers = [_offer("o1", value="10"), _offer("o2", "fixed", "300")]
        result = best_offer_price("1000", "p1", offers, now=NOW)
        assert result.price == Decimal("700.00")
        assert result.base_price == Decimal("1000.00")
        assert result.offer_id == "o2"

    def test_tie_keeps_earlier_offer(self):
        offers = [_offer("o1", value="10"), _offer("o2", "fixed", "100")]
        assert best_offer_price("1000", "p1", offers, now=NOW).offer_id == "o1"

    def test_no_applicable_offer(self):
        result = best_offer_price("1000", "p2", [_offer()], now=NOW)
        assert result.price == Decimal("1000.00")
        assert result.offer_id is None


def _promotion(promotion_id="promo-1", **kwargs):
    return PromotionTerms(promotion_id=promotion_id, name=promotion_id, **kwargs)


def _context(total="10000", shipping="300", quantity=2, product_id="p1"):
    lines = [PricedLine(product_id=product_id, quantity=quantity, unit_price=Decimal(total) / quantity)]
    return CartContext(lines=lines, total=Decimal(total), shipping_cost=Decimal(shipping))


class TestPromotionRules:
    engine = PromotionEngine(now=NOW)

    @pytest.mark.parametrize(
        "op, target, expected",
        [
            ("gte", "10000", True),
            ("gt", "10000", False),
            ("lt", "20000", True),
            ("eq", "10000", True),
            ("xx", "1", False),
        ],
    )
    def test_min_order_value_operators(self, op, target, expected):
        rule = PromotionRuleTerms(rule_type="min_order_value", operator=op, value=target)
        assert self.engine.evaluate_rule(rule, _context()) is expected

    def test_min_quantity(self):
        rule = PromotionRuleTerms(rule_type="min_quantity", operator="gte", value=3)
        assert not self.engine.evaluate_rule(rule, _context(quantity=2))
        assert self.engine.evaluate_rule(rule, _context(quantity=4))

    def test_specific_product(self):
        rule = PromotionRuleTerms(rule_type="specific_product", value=["p1", "p7"])
        assert self.engine.evaluate_rule(rule, _context())
        assert not self.engine.evaluate_rule(rule, _context(product_id="p2"))

    def test_customer_group_never_excludes(self):
        rule = PromotionRuleTerms(rule_type="customer_group", value="vip")
        assert self.engine.evaluate_rule(rule, _context())

    def test_unknown_rule_type_fails(self):
        assert not self.engine.evaluate_rule(PromotionRuleTerms(rule_type="weather"), _context())


class TestPromotionEngine:
    def test_percentage_action(self):
        promo = _promotion(actions=(PromotionActionTerms(action_type="percentage_discount", value=Decimal("10")),))
        outcome = PromotionEngine(now=NOW).apply([promo], _context())
        assert outcome.total_discount == Decimal("1000.00")
        assert outcome.final_total == Decimal("9000.00")

    def test_type_and_value_without_actions(self):
        promo = _promotion(type="fixed", value=Decimal("500"))
        outcome = PromotionEngine(now=NOW).apply([promo], _context())
        assert outcome.total_discount == Decimal("500.00")

    def test_discount_capped_at_total(self):
        promo = _promotion(type="fixed", value=Decimal("50000"))
        outcome = PromotionEngine(now=NOW).apply([promo], _context())
        assert outcome.final_total == Decimal("0.00")
        assert outcome.total_discount == Decimal("10000.00")

    def test_free_shipping_discounts_shipping_cost(self):
        promo = _promotion(actions=(PromotionActionTerms(action_type="free_shipping"),))
        outcome = PromotionEngine(now=NOW).apply([promo], _context(shipping="300"))
        assert outcome.free_shipping
        assert outcome.total_discount == Decimal("300.00")

    def test_non_stackable_promotion_stops_evaluation(self):
        first = _promotion("first", type="fixed", value=Decimal("100"), priority=5)
        second = _promotion("second", type="fixed", value=Decimal("200"), priority=1)
        outcome = PromotionEngine(now=NOW).apply([second, first], _context())
        assert [r.promotion_id for r in outcome.applied] == ["first"]

    def test_stackable_promotions_run_on_remaining_total(self):
        first = _promotion("first", type="percentage", value=Decimal("10"), priority=5, stackable=True)
        second = _promotion("second", type="percentage", value=Decimal("10"), priority=1)
        outcome = PromotionEngine(now=NOW).apply([first, second], _context())
        assert [r.amount for r in outcome.applied] == [Decimal("1000.00"), Decimal("900.00")]
        assert outcome.final_total == Decimal("8100.00")

    def test_rules_see_the_subtotal_before_earlier_discounts(self):
        first = _promotion("first", type="percentage", value=Decimal("10"), priority=10, stackable=True)
        second = _promotion(
            "second",
            type="fixed",
            value=Decimal("50"),
            priority=5,
            rules=(PromotionRuleTerms(rule_type="min_order_value", operator="gte", value="1000"),),
        )
        outcome = PromotionEngine(now=NOW).apply([first, second], _context(total="1000"))
        assert [r.promotion_id for r in outcome.applied] == ["first", "second"]
        assert outcome.total_discount == Decimal("150.00")

    def test_rules_must_all_pass(self):
        promo = _promotion(
            type="fixed",
            value=Decimal("500"),
            rules=(
                PromotionRuleTerms(rule_type="min_order_value", operator="gte", value="5000"),
                PromotionRuleTerms(rule_type="min_quantity", operator="gte", value=5),
            ),
        )
        assert PromotionEngine(now=NOW).apply([promo], _context()).applied == ()

    def test_inactive_and_expired_promotions_are_skipped(self):
        paused = _promotion("paused", type="fixed", value=Decimal("100"), status="paused")
        expired = _promotion("expired", type="fixed", value=Decimal("100"), end_at=NOW - timedelta(days=1))
        assert PromotionEngine(now=NOW).apply([paused, expired], _context()).applied == ()
