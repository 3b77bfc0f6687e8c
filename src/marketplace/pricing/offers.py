"""Vendor offer resolution: the lowest price any live offer gives a line."""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from marketplace.pricing.clock import utc_now, within_window
from marketplace.pricing.models import OfferPrice, OfferTerms
from marketplace.pricing.money import ZERO, round_money, to_decimal

SCOPE_ALL = "all"
SCOPE_PRODUCTS = "products"
SCOPE_CATEGORIES = "categories"
SCOPE_VARIANTS = "variants"
SCOPE_TYPES = (SCOPE_ALL, SCOPE_PRODUCTS, SCOPE_CATEGORIES, SCOPE_VARIANTS)

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED)


def offer_is_live(offer: OfferTerms, now: datetime | None = None) -> bool:
    return bool(offer.is_active) and within_window(now or utc_now(), offer.start_at, offer.end_at)


def offer_applies(
    offer: OfferTerms,
    product_id: str,
    category_id: str | None = None,
    variant_sku: str | None = None,
) -> bool:
    """Does the offer's scope cover this product, category or variant?"""
    scope = (offer.scope_type or SCOPE_PRODUCTS).lower()
    if scope == SCOPE_ALL:
        return True
    if scope == SCOPE_PRODUCTS:
        return str(product_id) in offer.scope_products
    if scope == SCOPE_CATEGORIES:
        return category_id is not None and str(category_id) in offer.scope_categories
    if scope == SCOPE_VARIANTS:
        return variant_sku is not None and str(variant_sku) in offer.scope_variants
    return False


def discounted_price(base_price: Decimal, discount_type: str, discount_value) -> Decimal:
    base = to_decimal(base_price)
    value = to_decimal(discount_value)
    kind = (discount_type or DISCOUNT_PERCENTAGE).lower()

    if kind == DISCOUNT_FIXED:
        candidate = base - value
    elif kind == DISCOUNT_PERCENTAGE:
        candidate = base * (1 - value / 100)
    else:
        raise ValueError(f"Unknown discount type: {discount_type}")

    return max(ZERO, candidate)


def best_offer_price(
    base_price,
    product_id: str,
    offers: Sequence[OfferTerms],
    category_id: str | None = None,
    variant_sku: str | None = None,
    now: datetime | None = None,
) -> OfferPrice:
    """Apply whichever live, in-scope offer yields the lowest unit price.

    Offers never stack. An offer only wins when it is strictly cheaper than
    the best price found so far, so on a tie the earlier offer is kept.
    """
    base = round_money(base_price)
    now = now or utc_now()

    best, best_offer_id = base, None
    for offer in offers:
        if not offer_is_live(offer, now) or not offer_applies(offer, product_id, category_id, variant_sku):
            continue
        candidate = discounted_price(base, offer.discount_type, offer.discount_value)
        if candidate < best:
            best, best_offer_id = candidate, offer.offer_id

    return OfferPrice(price=round_money(best), base_price=base, offer_id=best_offer_id)
