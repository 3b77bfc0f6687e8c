"""Admin and vendor dashboards, computed from the read models.

Order figures come from the order summaries rather than the event-sourced
orders themselves, so a dashboard never replays an order stream.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, ProductStatus
from marketplace.order.order import PAYMENT_COD, OrderStatus
from marketplace.pricing.money import ZERO, round_money, to_decimal
from marketplace.projections.buyer_orders import all_orders
from marketplace.projections.daily_order_stats import daily_order_stats
from marketplace.projections.product_card import ProductCard
from marketplace.projections.product_rating import ProductRating
from marketplace.projections.sku_sales import all_sku_sales
from marketplace.projections.vendor_sales import sales_for_stores
from marketplace.store.store import Store, StoreStatus

# Platform commission on delivered sales, in percent
DEFAULT_COMMISSION_RATE = Decimal("10")

IN_FLIGHT_STATUSES = frozenset(
    {OrderStatus.PENDING.value, OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value}
)


@dataclass(frozen=True)
class SkuMetric:
    sku: str
    units: int
    revenue: Decimal
    stock: int


@dataclass(frozen=True)
class PlatformAnalytics:
    total_products: int
    total_stores: int
    total_orders: int
    total_revenue: Decimal
    received_orders_value: Decimal
    pending_stores: int
    pending_products: int
    reviews_total: int
    reviews_average: float
    cod_orders: int
    cod_delivered: int
    stores_by_district: dict = field(default_factory=dict)
    top_gi_brands: list = field(default_factory=list)
    sku_metrics: list = field(default_factory=list)
    daily: list = field(default_factory=list)


@dataclass(frozen=True)
class VendorAnalytics:
    total_revenue: Decimal
    total_earnings: Decimal
    total_orders: int
    total_products: int
    total_stores: int


def _all(model) -> list:
    return current_domain.repository_for(model)._dao.query.limit(None).all().items


def _sum_totals(orders) -> Decimal:
    return round_money(sum((to_decimal(order.total) for order in orders), ZERO))


def _variant_stock(product_id, sku) -> int:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return 0
    variant = product.find_variant(sku)
    return (variant.stock or 0) if variant is not None else 0


def review_summary() -> tuple[int, float]:
    """Approved review count and average rating across the whole catalogue."""
    ratings = [r for r in _all(ProductRating) if r.review_count]
    total = sum(r.review_count for r in ratings)
    if not total:
        return 0, 0.0
    weighted = sum(Decimal(str(r.average_rating or 0)) * r.review_count for r in ratings)
    return total, float(round(weighted / total, 1))


def platform_analytics() -> PlatformAnalytics:
    cards = _all(ProductCard)
    stores = _all(Store)
    orders = all_orders().items
    reviews_total, reviews_average = review_summary()

    delivered = [o for o in orders if o.status == OrderStatus.DELIVERED.value]
    cod = [o for o in orders if (o.payment_method or "").lower() == PAYMENT_COD]

    gi_brands = Counter(card.gi_brand for card in cards if card.gi_brand)

    return PlatformAnalytics(
        total_products=len(cards),
        total_stores=len(stores),
        total_orders=len(orders),
        total_revenue=_sum_totals(delivered),
        received_orders_value=_sum_totals(o for o in orders if o.status in IN_FLIGHT_STATUSES),
        pending_stores=sum(1 for s in stores if s.status == StoreStatus.PENDING.value),
        pending_products=sum(1 for c in cards if c.status == ProductStatus.PENDING.value),
        reviews_total=reviews_total,
        reviews_average=reviews_average,
        cod_orders=len(cod),
        cod_delivered=sum(1 for o in cod if o.status == OrderStatus.DELIVERED.value),
        stores_by_district=dict(Counter(s.district for s in stores if s.district)),
        top_gi_brands=[{"brand": brand, "count": count} for brand, count in gi_brands.most_common()],
        sku_metrics=[
            SkuMetric(
                sku=row.sku,
                units=row.units or 0,
                revenue=round_money(row.revenue),
                stock=_variant_stock(row.product_id, row.sku),
            )
            for row in all_sku_sales()
        ],
        daily=daily_order_stats(),
    )


def vendor_analytics(store_ids) -> VendorAnalytics:
    """Sales figures across a vendor's stores.

    Revenue counts delivered sales only; earnings are revenue less the
    platform commission. Cancelled sales are left out of the order count.
    """
    store_ids = sorted(str(store_id) for store_id in store_ids)
    if not store_ids:
        return VendorAnalytics(ZERO, ZERO, 0, 0, 0)

    sales = sales_for_stores(store_ids)
    revenue = round_money(
        sum((to_decimal(s.gross_amount) for s in sales if s.status == OrderStatus.DELIVERED.value), ZERO)
    )
    earnings = round_money(revenue * (100 - DEFAULT_COMMISSION_RATE) / 100)
    products = (
        current_domain.repository_for(ProductCard)
        ._dao.query.filter(store_id__in=store_ids)
        .limit(None)
        .all()
        .total
    )
    return VendorAnalytics(
        total_revenue=revenue,
        total_earnings=earnings,
        total_orders=len({s.order_id for s in sales if s.status != OrderStatus.CANCELLED.value}),
        total_products=products,
        total_stores=len(store_ids),
    )
