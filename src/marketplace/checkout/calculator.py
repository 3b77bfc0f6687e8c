"""Server-side checkout pricing.

The calculator reads products, store offers, promotions and platform rules
from the repositories, translates them into the pricing engine's frozen
dataclasses and runs the engine in a fixed order: offers, subtotal,
shipping, promotions, tax, total. Whatever price a client sends is ignored.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import logger
from marketplace.offer.offer import Offer
from marketplace.pricing.clock import utc_now
from marketplace.pricing.models import (
    OfferTerms,
    PricedLine,
    PromotionActionTerms,
    PromotionOutcome,
    PromotionRuleTerms,
    PromotionTerms,
    ShippingQuote,
    ShippingRate,
    TaxRate,
    TaxResult,
)
from marketplace.pricing.money import ZERO, format_money, round_money, to_decimal
from marketplace.pricing.offers import best_offer_price
from marketplace.pricing.promotions import CartContext, PromotionEngine
from marketplace.pricing.province import compose_address, detect_province
from marketplace.pricing.shipping import compute_shipping, normalize_method
from marketplace.pricing.tax import compute_tax
from marketplace.promotion.promotion import Promotion, PromotionStatus
from marketplace.settings.platform import enabled_shipping_rules, enabled_tax_rules, load_platform_settings


@dataclass(frozen=True)
class CheckoutLine:
    """What the buyer asked for: a product, optionally a variant, and a quantity."""

    product_id: str
    quantity: int
    variant_sku: str | None = None


@dataclass(frozen=True)
class Quote:
    lines: tuple[PricedLine, ...]
    subtotal: Decimal
    offer_savings: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    method: str
    carrier: str
    province: str | None = None
    promotions: PromotionOutcome = field(default_factory=PromotionOutcome)
    taxes: TaxResult = field(default_factory=lambda: TaxResult(amount=ZERO))
    shipping_details: ShippingQuote | None = None

    @property
    def free_shipping(self) -> bool:
        return self.promotions.free_shipping

    def as_dict(self) -> dict:
        """Amounts as two-decimal strings, the way the storefront displays them."""
        return {
            "subtotal": format_money(self.subtotal),
            "offer_savings": format_money(self.offer_savings),
            "discount": format_money(self.discount),
            "taxes": format_money(self.tax),
            "shipping": format_money(self.shipping),
            "total": format_money(self.total),
            "discount_details": [
                {
                    "promotion_id": result.promotion_id,
                    "name": result.name,
                    "amount": format_money(result.amount),
                    "free_shipping": result.free_shipping,
                }
                for result in self.promotions.applied
            ],
            "tax_details": [
                {"product_id": line.product_id, "rate": str(line.rate), "tax": format_money(line.tax)}
                for line in self.taxes.breakdown
            ],
            "carrier": self.carrier,
            "province": self.province,
            "method": self.method,
        }


# ---------------------------------------------------------------------------
# Record to engine adapters
# ---------------------------------------------------------------------------
def offer_terms(offer: Offer) -> OfferTerms:
    return OfferTerms(
        offer_id=str(offer.id),
        discount_type=offer.discount_type,
        discount_value=to_decimal(offer.discount_value),
        scope_type=offer.scope_type,
        scope_products=tuple(str(p) for p in offer.scope_products or []),
        scope_categories=tuple(str(c) for c in offer.scope_categories or []),
        scope_variants=tuple(str(v) for v in offer.scope_variants or []),
        start_at=offer.start_at,
        end_at=offer.end_at,
        is_active=bool(offer.is_active),
    )


def promotion_terms(promotion: Promotion) -> PromotionTerms:
    return PromotionTerms(
        promotion_id=str(promotion.id),
        name=promotion.name,
        type=promotion.type,
        value=to_decimal(promotion.value),
        priority=promotion.priority or 0,
        stackable=bool(promotion.stackable),
        status=promotion.status,
        start_at=promotion.start_at,
        end_at=promotion.end_at,
        rules=tuple(
            PromotionRuleTerms(rule_type=rule.rule_type, operator=rule.operator, value=rule.parsed_value)
            for rule in promotion.rules
        ),
        actions=tuple(
            PromotionActionTerms(action_type=action.action_type, value=to_decimal(action.value), target=action.target)
            for action in promotion.actions
        ),
    )


def tax_rate(rule) -> TaxRate:
    return TaxRate(
        rate=to_decimal(rule.rate),
        category=rule.category,
        province=rule.province,
        exempt=bool(rule.exempt),
        enabled=bool(rule.enabled),
        priority=rule.priority or 0,
        name=rule.name,
    )


def shipping_rate(rule) -> ShippingRate:
    return ShippingRate(
        carrier=rule.carrier,
        method=rule.method,
        zone=rule.zone,
        min_weight_kg=to_decimal(rule.min_weight_kg),
        max_weight_kg=to_decimal(rule.max_weight_kg),
        base_rate=to_decimal(rule.base_rate),
        per_kg_rate=to_decimal(rule.per_kg_rate),
        surcharge=to_decimal(rule.surcharge),
        dimensional_factor=to_decimal(rule.dimensional_factor, default=None),
        enabled=bool(rule.enabled),
        priority=rule.priority or 0,
        name=rule.name,
    )


def price_line(product: Product, quantity: int, variant_sku=None, offers=(), now=None) -> PricedLine:
    """Resolve the unit price and tax and shipping attributes of one line."""
    variant = product.find_variant(variant_sku)

    variant_tax_exempt = variant.tax_exempt if variant is not None else None
    offer_price = best_offer_price(
        product.base_price(variant_sku),
        str(product.id),
        offers,
        category_id=product.category_id,
        variant_sku=variant_sku,
        now=now,
    )
    return PricedLine(
        product_id=str(product.id),
        quantity=quantity,
        unit_price=offer_price.price,
        base_price=offer_price.base_price,
        store_id=str(product.store_id),
        variant_sku=variant_sku,
        category_id=product.category_id,
        offer_id=offer_price.offer_id,
        tax_exempt=True if variant_tax_exempt else bool(product.tax_exempt),
        variant_tax_rate=to_decimal(variant.tax_rate, default=None) if variant is not None else None,
        weight_kg=to_decimal(product.weight_kg, default=None),
        length_cm=to_decimal(product.length_cm, default=None),
        width_cm=to_decimal(product.width_cm, default=None),
        height_cm=to_decimal(product.height_cm, default=None),
    )


class CheckoutCalculator:
    def __init__(self, now: datetime | None = None):
        self.now = now or utc_now()
        self._offers_by_store: dict[str, list[OfferTerms]] = {}

    def store_offers(self, store_id) -> list[OfferTerms]:
        """A store's active offers, oldest first so ties keep the earlier offer."""
        key = str(store_id)
        if key not in self._offers_by_store:
            offers = (
                current_domain.repository_for(Offer)
                ._dao.query.filter(store_id=key, is_active=True)
                .order_by("created_at")
                .limit(None)
                .all()
                .items
            )
            self._offers_by_store[key] = [offer_terms(o) for o in offers]
        return self._offers_by_store[key]

    def active_promotions(self) -> list[PromotionTerms]:
        promotions = (
            current_domain.repository_for(Promotion)
            ._dao.query.filter(status=PromotionStatus.ACTIVE.value)
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )
        return [promotion_terms(p) for p in promotions]

    def price_lines(self, lines: Sequence[CheckoutLine], products: Mapping[str, Product] | None = None):
        if not lines:
            raise ValidationError({"items": ["Items required"]})

        products = dict(products or {})
        priced = []
        for line in lines:
            product = products.get(str(line.product_id))
            if product is None:
                # Raises ObjectNotFoundError for an unknown product
                product = current_domain.repository_for(Product).get(line.product_id)
                products[str(line.product_id)] = product
            try:
                priced.append(
                    price_line(
                        product,
                        line.quantity,
                        variant_sku=line.variant_sku,
                        offers=self.store_offers(product.store_id),
                        now=self.now,
                    )
                )
            except ValueError as exc:
                raise ValidationError({"items": [str(exc)]}) from exc
        return priced

    def quote(
        self,
        lines: Sequence[CheckoutLine],
        address: str | None = None,
        province: str | None = None,
        method: str | None = None,
        buyer_id: str | None = None,
        products: Mapping[str, Product] | None = None,
    ) -> Quote:
        priced = self.price_lines(lines, products)
        settings = load_platform_settings()

        subtotal = sum((line.line_total for line in priced), ZERO)
        offer_savings = sum((line.savings for line in priced), ZERO)
        province = province or detect_province(address)
        method = normalize_method(method)

        shipping = compute_shipping(
            priced,
            [shipping_rate(r) for r in enabled_shipping_rules()],
            method=method,
            shipping_enabled=bool(settings.shipping_enabled),
        )

        context = CartContext(lines=priced, total=subtotal, shipping_cost=shipping.amount, buyer_id=buyer_id)
        promotions = PromotionEngine(now=self.now).apply(self.active_promotions(), context)

        taxes = compute_tax(priced, [tax_rate(r) for r in enabled_tax_rules()], tax_enabled=bool(settings.tax_enabled))

        total = max(ZERO, subtotal - promotions.total_discount + taxes.amount + shipping.amount)
        quote = Quote(
            lines=tuple(priced),
            subtotal=round_money(subtotal),
            offer_savings=round_money(offer_savings),
            discount=promotions.total_discount,
            tax=taxes.amount,
            shipping=shipping.amount,
            total=round_money(total),
            method=method,
            carrier=shipping.carrier,
            province=province,
            promotions=promotions,
            taxes=taxes,
            shipping_details=shipping,
        )
        logger.debug(
            "checkout_quoted",
            buyer_id=buyer_id,
            lines=len(priced),
            subtotal=str(quote.subtotal),
            total=str(quote.total),
        )
        return quote


def quote_for_address(lines, street=None, city=None, province=None, postal_code=None, country=None, **kwargs) -> Quote:
    """Quote with the address given as separate form fields."""
    address = compose_address(street, city, province, postal_code, country)
    return CheckoutCalculator().quote(lines, address=address, province=province, **kwargs)
