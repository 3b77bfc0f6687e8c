"""Application tests for platform settings, tax and shipping rules, promotions and offers."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from marketplace.checkout.calculator import CheckoutCalculator, CheckoutLine
from marketplace.offer.management import CreateOffer, DeleteOffer, UpdateOffer
from marketplace.offer.offer import Offer
from marketplace.promotion.management import (
    ActivatePromotion,
    AddPromotionAction,
    AddPromotionRule,
    ChangePromotionStatus,
    CreatePromotion,
    PausePromotion,
    RemovePromotionAction,
    RemovePromotionRule,
    UpdatePromotion,
)
from marketplace.promotion.promotion import Promotion
from marketplace.settings.management import (
    CreateShippingRule,
    CreateTaxRule,
    DeleteShippingRule,
    DeleteTaxRule,
    UpdatePlatformSettings,
    UpdateShippingRule,
    UpdateTaxRule,
)
from marketplace.settings.platform import (
    DEFAULT_COD_LIMIT,
    ShippingRateRule,
    TaxRule,
    enabled_tax_rules,
    load_platform_settings,
)
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

NOW = datetime.now(UTC)


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestPlatformSettings:
    def test_defaults_on_first_use(self):
        settings = load_platform_settings()
        assert settings.id == "default"
        assert settings.cod_limit == DEFAULT_COD_LIMIT
        assert settings.tax_enabled is True
        assert settings.strict_cod_risk_check is False

    def test_partial_update(self):
        _process(UpdatePlatformSettings(cod_limit=50000.0))
        _process(UpdatePlatformSettings(tax_enabled=False))
        settings = load_platform_settings()
        assert settings.cod_limit == 50000.0
        assert settings.tax_enabled is False
        assert settings.shipping_enabled is True

    def test_negative_cod_limit_rejected(self):
        with pytest.raises(ValidationError):
            _process(UpdatePlatformSettings(cod_limit=-1.0))


class TestTaxRules:
    def test_crud(self):
        rule_id = _process(CreateTaxRule(name="GST", rate=17.0))
        _process(UpdateTaxRule(rule_id=rule_id, rate=18.0, province="Sindh"))
        rule = current_domain.repository_for(TaxRule).get(rule_id)
        assert rule.rate == 18.0
        assert rule.province == "Sindh"
        assert rule.name == "GST"

        _process(DeleteTaxRule(rule_id=rule_id))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(TaxRule).get(rule_id)

    def test_disabled_rules_are_ignored(self):
        _process(CreateTaxRule(name="GST", rate=17.0))
        _process(CreateTaxRule(name="Old levy", rate=2.0, enabled=False))
        assert [r.name for r in enabled_tax_rules()] == ["GST"]

    def test_rate_over_hundred_rejected(self):
        with pytest.raises(ValidationError):
            _process(CreateTaxRule(name="Broken", rate=150.0))


class TestShippingRules:
    def test_crud(self):
        rule_id = _process(CreateShippingRule(name="Light parcels", max_weight_kg=2.0, base_rate=200.0))
        _process(UpdateShippingRule(rule_id=rule_id, min_weight_kg=1.0, max_weight_kg=3.0))
        rule = current_domain.repository_for(ShippingRateRule).get(rule_id)
        assert (rule.min_weight_kg, rule.max_weight_kg) == (1.0, 3.0)

        _process(DeleteShippingRule(rule_id=rule_id))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ShippingRateRule).get(rule_id)

    def test_inverted_weight_band_rejected(self):
        rule_id = _process(CreateShippingRule(name="Light parcels", max_weight_kg=2.0))
        with pytest.raises(ValidationError):
            _process(UpdateShippingRule(rule_id=rule_id, min_weight_kg=5.0))


class TestPromotions:
    def _create(self, **overrides):
        fields = {"name": "Eid sale", "type": "percentage", "value": 10.0}
        fields.update(overrides)
        return _process(CreatePromotion(**fields))

    def test_created_with_rules_and_actions(self):
        promotion_id = self._create(
            rules=[{"rule_type": "min_quantity", "operator": "gte", "value": 2}],
            actions=[{"action_type": "free_shipping"}],
        )
        promotion = current_domain.repository_for(Promotion).get(promotion_id)
        assert promotion.status == "active"
        assert promotion.rules[0].parsed_value == 2
        assert promotion.actions[0].target == "order_total"

    def test_update_and_status(self):
        promotion_id = self._create(status="draft")
        _process(UpdatePromotion(promotion_id=promotion_id, name="Eid ul Adha sale", priority=3))
        _process(ActivatePromotion(promotion_id=promotion_id))
        promotion = current_domain.repository_for(Promotion).get(promotion_id)
        assert promotion.name == "Eid ul Adha sale"
        assert promotion.priority == 3
        assert promotion.status == "active"

        _process(PausePromotion(promotion_id=promotion_id))
        assert current_domain.repository_for(Promotion).get(promotion_id).status == "paused"

        _process(ChangePromotionStatus(promotion_id=promotion_id, status="expired"))
        assert current_domain.repository_for(Promotion).get(promotion_id).status == "expired"

    def test_percentage_over_hundred_rejected(self):
        with pytest.raises(ValidationError):
            self._create(value=120.0)

    def test_rule_gates_the_discount(self, make_store, make_product):
        product_id = make_product(make_store(), price=1000.0)
        promotion_id = self._create()
        rule_id = _process(AddPromotionRule(promotion_id=promotion_id, rule_type="min_order_value", value="5000"))

        def discount():
            return CheckoutCalculator().quote([CheckoutLine(product_id=product_id, quantity=2)]).discount

        assert discount() == Decimal("0.00")

        _process(RemovePromotionRule(promotion_id=promotion_id, rule_id=rule_id))
        assert discount() == Decimal("200.00")

    def test_actions_can_be_removed(self):
        promotion_id = self._create()
        action_id = _process(AddPromotionAction(promotion_id=promotion_id, action_type="fixed_amount", value=50.0))
        assert len(current_domain.repository_for(Promotion).get(promotion_id).actions) == 1

        _process(RemovePromotionAction(promotion_id=promotion_id, action_id=action_id))
        assert current_domain.repository_for(Promotion).get(promotion_id).actions == []

    def test_unknown_rule_type_rejected(self):
        promotion_id = self._create()
        with pytest.raises(ValidationError):
            _process(AddPromotionRule(promotion_id=promotion_id, rule_type="birthday", value="1"))


class TestOffers:
    def test_update_and_delete(self, make_store):
        store_id = make_store()
        offer_id = _process(
            CreateOffer(
                store_id=store_id,
                name="Launch week",
                discount_value=15.0,
                start_at=NOW,
                end_at=NOW + timedelta(days=7),
            )
        )
        _process(UpdateOffer(offer_id=offer_id, discount_value=20.0, is_active=False))

        offer = current_domain.repository_for(Offer).get(offer_id)
        assert offer.discount_value == 20.0
        assert offer.is_active is False
        assert offer.name == "Launch week"

        _process(DeleteOffer(offer_id=offer_id))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Offer).get(offer_id)

    def test_unknown_store(self):
        with pytest.raises(ObjectNotFoundError):
            _process(
                CreateOffer(
                    store_id="no-such-store",
                    name="Ghost",
                    discount_value=5.0,
                    start_at=NOW,
                    end_at=NOW + timedelta(days=1),
                )
            )
