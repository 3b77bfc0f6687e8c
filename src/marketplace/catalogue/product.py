"""Product aggregate root with the Variant entity.

Vendors list products into the pending state; an admin approves them before
they can be ordered. Variants carry their own SKU and may override the
product's price and stock. Stock never goes below zero.
"""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Dict, Float, HasMany, Identifier, Integer, List, String, Text

from marketplace.domain import marketplace


class ProductStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@marketplace.entity(part_of="Product")
class Variant:
    """A purchasable option of a product, e.g. a size or a colour.

    ``attributes`` is free-form; ``taxRate`` and ``taxExempt`` keys in it
    override the product's tax treatment at checkout.
    """

    sku: String(required=True, max_length=100)
    attributes: Dict()
    price: Float(min_value=0.0)
    stock: Integer(min_value=0)

    @property
    def tax_rate(self):
        return (self.attributes or {}).get("taxRate")

    @property
    def tax_exempt(self):
        value = (self.attributes or {}).get("taxExempt")
        return None if value is None else bool(value)


@marketplace.aggregate
class Product:
    store_id: Identifier(required=True)
    title: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True)
    stock: Integer(default=0)
    images: List(String(max_length=500))
    district: String(required=True, max_length=100)
    gi_brand: String(required=True, max_length=100)
    category_id: Identifier()
    status: String(choices=ProductStatus, default=ProductStatus.PENDING.value)
    is_active: Boolean(default=True)
    tax_exempt: Boolean(default=False)
    weight_kg: Float(min_value=0.0)
    length_cm: Float(min_value=0.0)
    width_cm: Float(min_value=0.0)
    height_cm: Float(min_value=0.0)
    variants: HasMany(Variant)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime()

    @invariant.post
    def price_must_be_positive(self):
        if self.price is None or self.price <= 0:
            raise ValidationError({"price": ["Price must be greater than zero"]})

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku for v in self.variants or []]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_orderable(self) -> bool:
        return self.status == ProductStatus.APPROVED.value and bool(self.is_active)

    def find_variant(self, sku):
        if not sku:
            return None
        return next((v for v in self.variants or [] if v.sku == sku), None)

    def available_stock(self, variant_sku=None) -> int:
        """Units on hand for the product, or for one of its variants."""
        variant = self.find_variant(variant_sku)
        if variant is not None and variant.stock is not None:
            return variant.stock
        return self.stock or 0

    def base_price(self, variant_sku=None) -> float:
        variant = self.find_variant(variant_sku)
        if variant is not None and variant.price is not None:
            return variant.price
        return self.price

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        store_id,
        title,
        price,
        stock,
        district,
        gi_brand,
        description=None,
        images=None,
        category_id=None,
        tax_exempt=False,
        weight_kg=None,
        length_cm=None,
        width_cm=None,
        height_cm=None,
    ):
        from marketplace.catalogue.events import ProductListed

        now = datetime.now()
        product = cls(
            store_id=store_id,
            title=title,
            description=description,
            price=price,
            stock=stock or 0,
            images=list(images or []),
            district=district,
            gi_brand=gi_brand,
            category_id=category_id,
            tax_exempt=bool(tax_exempt),
            weight_kg=weight_kg,
            length_cm=length_cm,
            width_cm=width_cm,
            height_cm=height_cm,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=product.id,
                store_id=store_id,
                title=title,
                price=price,
                stock=product.stock,
                district=district,
                gi_brand=gi_brand,
                category_id=category_id,
                image_url=product.images[0] if product.images else None,
                status=product.status,
                is_active=product.is_active,
                listed_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply the provided (non-None) fields and announce the new listing data."""
        from marketplace.catalogue.events import ProductDetailsUpdated

        editable = (
            "title",
            "description",
            "price",
            "images",
            "district",
            "gi_brand",
            "category_id",
            "tax_exempt",
            "weight_kg",
            "length_cm",
            "width_cm",
            "height_cm",
        )
        for name in editable:
            value = changes.get(name)
            if value is not None:
                setattr(self, name, list(value) if name == "images" else value)

        self.updated_at = datetime.now()
        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                title=self.title,
                price=self.price,
                district=self.district,
                gi_brand=self.gi_brand,
                category_id=self.category_id,
                image_url=self.images[0] if self.images else None,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def set_stock(self, quantity, variant_sku=None):
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Stock cannot be negative"]})

        if variant_sku:
            variant = self._variant_or_error(variant_sku)
            variant.stock = quantity
        else:
            self.stock = quantity
        self._stock_changed(variant_sku, reason="adjusted")

    def withdraw_stock(self, quantity, variant_sku=None):
        """Take ordered units off the shelf, flooring at zero."""
        variant = self.find_variant(variant_sku)
        if variant is not None and variant.stock is not None:
            variant.stock = max(0, variant.stock - quantity)
        else:
            self.stock = max(0, (self.stock or 0) - quantity)
        self._stock_changed(variant_sku, reason="ordered")

    def restock(self, quantity, variant_sku=None):
        """Put units back, e.g. when an order is cancelled."""
        variant = self.find_variant(variant_sku)
        if variant is not None and variant.stock is not None:
            variant.stock = variant.stock + quantity
        else:
            self.stock = (self.stock or 0) + quantity
        self._stock_changed(variant_sku, reason="restocked")

    def _stock_changed(self, variant_sku, reason):
        from marketplace.catalogue.events import StockChanged

        self.updated_at = datetime.now()
        self.raise_(
            StockChanged(
                product_id=self.id,
                variant_sku=variant_sku,
                stock=self.stock,
                variant_stock=self.available_stock(variant_sku) if variant_sku else None,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    def _variant_or_error(self, sku):
        variant = self.find_variant(sku)
        if variant is None:
            raise ValidationError({"variant_sku": [f"Variant {sku} not found"]})
        return variant

    def add_variant(self, sku, attributes=None, price=None, stock=None):
        from marketplace.catalogue.events import VariantAdded

        if not sku or not sku.strip():
            raise ValidationError({"sku": ["SKU is required"]})
        sku = sku.strip()
        if self.find_variant(sku) is not None:
            raise ValidationError({"sku": [f"SKU {sku} already exists on this product"]})

        variant = Variant(sku=sku, attributes=dict(attributes or {}), price=price, stock=stock)
        self.add_variants(variant)
        self.updated_at = datetime.now()
        self.raise_(VariantAdded(product_id=self.id, sku=sku, price=price, stock=stock))

    def update_variant(self, sku, attributes=None, price=None, stock=None):
        from marketplace.catalogue.events import VariantUpdated

        variant = self._variant_or_error(sku)
        if attributes is not None:
            variant.attributes = dict(attributes)
        if price is not None:
            variant.price = price
        if stock is not None:
            variant.stock = stock

        self.updated_at = datetime.now()
        self.raise_(VariantUpdated(product_id=self.id, sku=sku, price=variant.price, stock=variant.stock))

    def remove_variant(self, sku):
        from marketplace.catalogue.events import VariantRemoved

        variant = self._variant_or_error(sku)
        self.remove_variants(variant)
        self.updated_at = datetime.now()
        self.raise_(VariantRemoved(product_id=self.id, sku=sku))

    # -------------------------------------------------------------------
    # Moderation and visibility
    # -------------------------------------------------------------------
    def change_status(self, status):
        try:
            new_status = ProductStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown product status: {status}"]})

        self.status = new_status.value
        self._availability_changed()

    def toggle_active(self):
        self.is_active = not self.is_active
        self._availability_changed()

    def delist(self):
        """Take the product off sale for good; orders keep referring to it."""
        self.is_active = False
        self.status = ProductStatus.REJECTED.value
        self._availability_changed()

    def _availability_changed(self):
        from marketplace.catalogue.events import ProductAvailabilityChanged

        now = datetime.now()
        self.updated_at = now
        self.raise_(
            ProductAvailabilityChanged(
                product_id=self.id,
                status=self.status,
                is_active=self.is_active,
                changed_at=now,
            )
        )
