"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A vendor listed a product; it awaits approval."""

    __version__ = 1

    product_id: Identifier(required=True)
    store_id: Identifier(required=True)
    title: String(required=True)
    price: Float(required=True)
    stock: Integer()
    district: String(required=True)
    gi_brand: String(required=True)
    category_id: Identifier()
    image_url: String()
    status: String(required=True)
    is_active: Boolean(required=True)
    listed_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    price: Float(required=True)
    district: String()
    gi_brand: String()
    category_id: Identifier()
    image_url: String()


@marketplace.event(part_of="Product")
class StockChanged:
    """Stock was set by the vendor, withdrawn by an order or put back."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_sku: String()
    stock: Integer()
    variant_stock: Integer()
    reason: String(required=True)


@marketplace.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    price: Float()
    stock: Integer()


@marketplace.event(part_of="Product")
class VariantUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    price: Float()
    stock: Integer()


@marketplace.event(part_of="Product")
class VariantRemoved:
    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)


@marketplace.event(part_of="Product")
class ProductAvailabilityChanged:
    """Approval status or the active flag changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    status: String(required=True)
    is_active: Boolean(required=True)
    changed_at: DateTime(required=True)
