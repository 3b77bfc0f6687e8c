"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartChanged:
    """A cart line was added, resized or removed (quantity 0)."""

    __version__ = 1

    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_sku: String()
    quantity: Integer(required=True)


@marketplace.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    buyer_id: Identifier(required=True)
