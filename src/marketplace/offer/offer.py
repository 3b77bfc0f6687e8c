"""Offer aggregate: a store's time-boxed discount on some or all of its products."""

from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, List, String

from marketplace.domain import marketplace
from marketplace.pricing.clock import as_utc, utc_now, within_window
from marketplace.pricing.offers import DISCOUNT_PERCENTAGE, SCOPE_PRODUCTS


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class OfferScope(Enum):
    ALL = "all"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    VARIANTS = "variants"



def check_window(start_at, end_at):
    if as_utc(start_at) > as_utc(end_at):
        raise ValidationError({"end_at": ["Offer cannot end before it starts"]})


@marketplace.aggregate
class Offer:
    store_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    discount_type: String(choices=DiscountType, default=DISCOUNT_PERCENTAGE)
    discount_value: Float(required=True, min_value=0.0)
    scope_type: String(choices=OfferScope, default=SCOPE_PRODUCTS)
    scope_products: List(String(max_length=100))
    scope_categories: List(String(max_length=100))
    scope_variants: List(String(max_length=100))
    start_at: DateTime(required=True)
    end_at: DateTime(required=True)
    is_active: Boolean(default=True)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime()

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    def is_live(self, now=None) -> bool:
        return bool(self.is_active) and within_window(now or utc_now(), self.start_at, self.end_at)

    @classmethod
    def create(
        cls,
        store_id,
        name,
        discount_type,
        discount_value,
        start_at,
        end_at,
        scope_type=None,
        scope_products=None,
        scope_categories=None,
        scope_variants=None,
    ):
        from marketplace.offer.events import OfferCreated

        if start_at is None or end_at is None:
            raise ValidationError({"start_at": ["Offer start and end dates are required"]})
        check_window(start_at, end_at)

        offer = cls(
            store_id=store_id,
            name=name,
            discount_type=discount_type or DISCOUNT_PERCENTAGE,
            discount_value=discount_value,
            scope_type=scope_type or SCOPE_PRODUCTS,
            scope_products=list(scope_products or []),
            scope_categories=list(scope_categories or []),
            scope_variants=list(scope_variants or []),
            start_at=start_at,
            end_at=end_at,
        )
        offer.raise_(
            OfferCreated(
                offer_id=offer.id,
                store_id=store_id,
                name=name,
                discount_type=offer.discount_type,
                discount_value=offer.discount_value,
                scope_type=offer.scope_type,
                start_at=start_at,
                end_at=end_at,
            )
        )
        return offer

    def update(self, **changes):
        """Apply the provided (non-None) fields.

        The window is only checked when both dates are given, so a window can
        be moved wholesale past its old end date and a single date can move freely.
        """
        from marketplace.offer.events import OfferUpdated

        editable = (
            "name",
            "discount_type",
            "discount_value",
            "scope_type",
            "scope_products",
            "scope_categories",
            "scope_variants",
            "start_at",
            "end_at",
            "is_active",
        )
        provided = {name: changes[name] for name in editable if changes.get(name) is not None}
        if not provided:
            return
        if "start_at" in provided and "end_at" in provided:
            check_window(provided["start_at"], provided["end_at"])

        with atomic_change(self):
            for name, value in provided.items():
                setattr(self, name, value)
            self.updated_at = datetime.now()

        self.raise_(OfferUpdated(offer_id=self.id, store_id=self.store_id, changed_fields=sorted(provided)))
