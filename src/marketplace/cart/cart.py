"""Cart aggregate — one per buyer, keyed by the buyer's id.

Quantities are capped at the stock available when the line is touched; the
order placement re-checks stock, so a cart can go stale without harm.
"""

from datetime import datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id: Identifier(required=True)
    variant_sku: String(max_length=100)
    store_id: Identifier()
    quantity: Integer(required=True, min_value=1)


@marketplace.aggregate
class Cart:
    buyer_id: Identifier(identifier=True, required=True)
    items: HasMany(CartItem)
    updated_at: DateTime()

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items or [])

    def find_item(self, product_id, variant_sku=None):
        variant_sku = variant_sku or None
        return next(
            (
                i
                for i in self.items or []
                if str(i.product_id) == str(product_id) and (i.variant_sku or None) == variant_sku
            ),
            None,
        )

    def add_item(self, product_id, quantity, available, variant_sku=None, store_id=None):
        """Add units of a product, merging with an existing line and capping at ``available``."""
        from marketplace.cart.events import CartChanged

        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if available <= 0:
            raise ValidationError({"quantity": ["This item is out of stock"]})

        existing = self.find_item(product_id, variant_sku)
        if existing:
            existing.quantity = min(existing.quantity + quantity, available)
            new_quantity = existing.quantity
        else:
            new_quantity = min(quantity, available)
            self.add_items(
                CartItem(
                    product_id=product_id,
                    variant_sku=variant_sku or None,
                    store_id=store_id,
                    quantity=new_quantity,
                )
            )

        self.updated_at = datetime.now()
        self.raise_(
            CartChanged(buyer_id=self.buyer_id, product_id=product_id, variant_sku=variant_sku, quantity=new_quantity)
        )
        return new_quantity

    def update_item(self, product_id, quantity, available, variant_sku=None):
        """Set a line's quantity; zero or less removes the line."""
        from marketplace.cart.events import CartChanged

        item = self.find_item(product_id, variant_sku)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        if quantity is None or quantity <= 0:
            self.remove_items(item)
            new_quantity = 0
        else:
            if available <= 0:
                raise ValidationError({"quantity": ["This item is out of stock"]})
            item.quantity = min(quantity, available)
            new_quantity = item.quantity

        self.updated_at = datetime.now()
        self.raise_(
            CartChanged(buyer_id=self.buyer_id, product_id=product_id, variant_sku=variant_sku, quantity=new_quantity)
        )
        return new_quantity

    def remove_item(self, product_id, variant_sku=None):
        """Remove one variant line, or every line of the product when no SKU is given."""
        from marketplace.cart.events import CartChanged

        if variant_sku:
            doomed = [
                i for i in self.items or [] if str(i.product_id) == str(product_id) and i.variant_sku == variant_sku
            ]
        else:
            doomed = [i for i in self.items or [] if str(i.product_id) == str(product_id)]

        for item in doomed:
            self.remove_items(item)

        self.updated_at = datetime.now()
        self.raise_(CartChanged(buyer_id=self.buyer_id, product_id=product_id, variant_sku=variant_sku, quantity=0))

    def clear(self):
        from marketplace.cart.events import CartCleared

        for item in list(self.items or []):
            self.remove_items(item)
        self.updated_at = datetime.now()
        self.raise_(CartCleared(buyer_id=self.buyer_id))
