"""Catalogue browsing over the product card projection."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from marketplace.catalogue.category import ProductCategory
from marketplace.catalogue.product import ProductStatus
from marketplace.projections.product_card import ProductCard

DEFAULT_PAGE_SIZE = 24
MAX_PAGE_SIZE = 100
STATUS_ALL = "all"


@dataclass(frozen=True)
class ProductPage:
    cards: list
    total: int
    page: int
    page_size: int


def browse_products(
    district=None,
    gi_brand=None,
    category_id=None,
    store_id=None,
    min_price=None,
    max_price=None,
    search=None,
    status=None,
    include_inactive=False,
    page=1,
    page_size=DEFAULT_PAGE_SIZE,
) -> ProductPage:
    """Newest products first, filtered and paged.

    Shoppers only see approved, active products; ``status`` and
    ``include_inactive`` are for admins, with ``status="all"`` lifting the
    status filter entirely.
    """
    page = max(1, int(page or 1))
    page_size = min(max(1, int(page_size or DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)

    filters = {}
    if status != STATUS_ALL:
        filters["status"] = status or ProductStatus.APPROVED.value
    if not include_inactive:
        filters["is_active"] = True
    if district:
        filters["district"] = district
    if gi_brand:
        filters["gi_brand"] = gi_brand
    if category_id:
        filters["category_id"] = category_id
    if store_id:
        filters["store_id"] = store_id
    if min_price is not None:
        filters["price__gte"] = float(min_price)
    if max_price is not None:
        filters["price__lte"] = float(max_price)
    if search:
        filters["title__icontains"] = search

    query = current_domain.repository_for(ProductCard)._dao.query.filter(**filters).order_by("-listed_at")
    result = query.offset((page - 1) * page_size).limit(page_size).all()
    return ProductPage(cards=result.items, total=result.total, page=page, page_size=page_size)


MAX_SUGGESTIONS = 10


def suggest_products(q, limit=MAX_SUGGESTIONS) -> list:
    """Search-box suggestions over approved, active products, newest first.

    Titles starting with ``q`` come first; the rest is filled with products
    whose title, GI brand or category name contains it. Matching ignores case.
    """
    needle = (q or "").strip().lower()
    limit = min(int(limit or MAX_SUGGESTIONS), MAX_SUGGESTIONS)
    if not needle or limit < 1:
        return []

    cards = (
        current_domain.repository_for(ProductCard)
        ._dao.query.filter(status=ProductStatus.APPROVED.value, is_active=True)
        .order_by("-listed_at")
        .limit(None)
        .all()
        .items
    )
    category_ids = {
        str(category.id)
        for category in current_domain.repository_for(ProductCategory)._dao.query.limit(None).all().items
        if needle in (category.name or "").lower()
    }

    def contains(card):
        return (
            needle in (card.title or "").lower()
            or needle in (card.gi_brand or "").lower()
            or (card.category_id is not None and str(card.category_id) in category_ids)
        )

    prefixed = [card for card in cards if (card.title or "").lower().startswith(needle)]
    prefixed_ids = {card.product_id for card in prefixed}
    rest = [card for card in cards if card.product_id not in prefixed_ids and contains(card)]
    return (prefixed + rest)[:limit]
