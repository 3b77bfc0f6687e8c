"""Buyer list management — commands and handlers."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, List, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.lists.lists import CompareList, RecentlyViewed, Wishlist


def load_list(list_cls, buyer_id):
    try:
        return current_domain.repository_for(list_cls).get(buyer_id)
    except ObjectNotFoundError:
        return list_cls(buyer_id=buyer_id)


def _ensure_product_exists(product_id):
    # Raises ObjectNotFoundError for an unknown product
    current_domain.repository_for(Product).get(product_id)


@marketplace.command(part_of="Wishlist")
class AddToWishlist:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)


@marketplace.command(part_of="Wishlist")
class RemoveFromWishlist:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)


@marketplace.command(part_of="Wishlist")
class SyncWishlist:
    """Merge product ids saved on a device into the buyer's wishlist."""

    buyer_id: Identifier(required=True)
    product_ids: List(String(max_length=100))


@marketplace.command(part_of="CompareList")
class AddToCompare:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)


@marketplace.command(part_of="CompareList")
class RemoveFromCompare:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)


@marketplace.command(part_of="CompareList")
class ClearCompare:
    buyer_id: Identifier(required=True)


@marketplace.command(part_of="RecentlyViewed")
class RecordProductView:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)


@marketplace.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(AddToWishlist)
    def add(self, command):
        _ensure_product_exists(command.product_id)
        wishlist = load_list(Wishlist, command.buyer_id)
        wishlist.add(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return list(wishlist.product_ids)

    @handle(RemoveFromWishlist)
    def remove(self, command):
        wishlist = load_list(Wishlist, command.buyer_id)
        wishlist.remove(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return list(wishlist.product_ids)

    @handle(SyncWishlist)
    def sync(self, command):
        wishlist = load_list(Wishlist, command.buyer_id)
        wishlist.add(*(command.product_ids or []))
        current_domain.repository_for(Wishlist).add(wishlist)
        return list(wishlist.product_ids)


@marketplace.command_handler(part_of=CompareList)
class CompareListHandler:
    @handle(AddToCompare)
    def add(self, command):
        _ensure_product_exists(command.product_id)
        compare = load_list(CompareList, command.buyer_id)
        compare.add(command.product_id)
        current_domain.repository_for(CompareList).add(compare)
        return list(compare.product_ids)

    @handle(RemoveFromCompare)
    def remove(self, command):
        compare = load_list(CompareList, command.buyer_id)
        compare.remove(command.product_id)
        current_domain.repository_for(CompareList).add(compare)
        return list(compare.product_ids)

    @handle(ClearCompare)
    def clear(self, command):
        compare = load_list(CompareList, command.buyer_id)
        compare.clear()
        current_domain.repository_for(CompareList).add(compare)
        return []


@marketplace.command_handler(part_of=RecentlyViewed)
class RecentlyViewedHandler:
    @handle(RecordProductView)
    def record(self, command):
        recent = load_list(RecentlyViewed, command.buyer_id)
        recent.record(command.product_id)
        current_domain.repository_for(RecentlyViewed).add(recent)
        return list(recent.product_ids)
