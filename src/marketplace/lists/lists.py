"""Buyer product lists: wishlist, comparison list and recently viewed.

Each list is an aggregate keyed by the buyer's id and holds product ids in
display order.
"""

from datetime import datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, List, String

from marketplace.domain import marketplace

MAX_COMPARE_ITEMS = 4
MAX_RECENTLY_VIEWED = 20


@marketplace.aggregate
class Wishlist:
    buyer_id: Identifier(identifier=True, required=True)
    product_ids: List(String(max_length=100))
    updated_at: DateTime()

    def add(self, *product_ids):
        current = list(self.product_ids or [])
        for product_id in product_ids:
            if product_id and str(product_id) not in current:
                current.append(str(product_id))
        self.product_ids = current
        self.updated_at = datetime.now()

    def remove(self, product_id):
        self.product_ids = [p for p in self.product_ids or [] if p != str(product_id)]
        self.updated_at = datetime.now()


@marketplace.aggregate
class CompareList:
    buyer_id: Identifier(identifier=True, required=True)
    product_ids: List(String(max_length=100))
    updated_at: DateTime()

    @invariant.post
    def cannot_compare_more_than_four(self):
        if len(self.product_ids or []) > MAX_COMPARE_ITEMS:
            raise ValidationError({"product_ids": [f"You can compare at most {MAX_COMPARE_ITEMS} products"]})

    def add(self, product_id):
        if str(product_id) in (self.product_ids or []):
            return
        self.product_ids = [*(self.product_ids or []), str(product_id)]
        self.updated_at = datetime.now()

    def remove(self, product_id):
        self.product_ids = [p for p in self.product_ids or [] if p != str(product_id)]
        self.updated_at = datetime.now()

    def clear(self):
        self.product_ids = []
        self.updated_at = datetime.now()


@marketplace.aggregate
class RecentlyViewed:
    buyer_id: Identifier(identifier=True, required=True)
    product_ids: List(String(max_length=100))
    updated_at: DateTime()

    def record(self, product_id):
        """Move the product to the front, keeping the most recent views only."""
        rest = [p for p in self.product_ids or [] if p != str(product_id)]
        self.product_ids = [str(product_id), *rest][:MAX_RECENTLY_VIEWED]
        self.updated_at = datetime.now()
