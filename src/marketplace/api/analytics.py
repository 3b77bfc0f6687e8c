"""Admin and vendor dashboard endpoints."""

from fastapi import APIRouter, Depends

from marketplace.api.access import Actor, current_actor, forbidden, owned_store_ids, require_admin
from marketplace.api.schemas import (
    BrandCount,
    DailyOrderStatsResponse,
    PlatformAnalyticsResponse,
    SkuMetricResponse,
    VendorAnalyticsResponse,
)
from marketplace.pricing.money import format_money
from marketplace.reporting.analytics import platform_analytics, vendor_analytics

router = APIRouter(tags=["analytics"])


@router.get("/admin/analytics", response_model=PlatformAnalyticsResponse)
async def admin_analytics(actor: Actor = Depends(current_actor)) -> PlatformAnalyticsResponse:
    require_admin(actor)
    stats = platform_analytics()
    return PlatformAnalyticsResponse(
        total_products=stats.total_products,
        total_stores=stats.total_stores,
        total_orders=stats.total_orders,
        total_revenue=format_money(stats.total_revenue),
        received_orders_value=format_money(stats.received_orders_value),
        pending_stores=stats.pending_stores,
        pending_products=stats.pending_products,
        reviews_total=stats.reviews_total,
        reviews_average=stats.reviews_average,
        cod_orders=stats.cod_orders,
        cod_delivered=stats.cod_delivered,
        stores_by_district=stats.stores_by_district,
        top_gi_brands=[BrandCount(**entry) for entry in stats.top_gi_brands],
        sku_metrics=[
            SkuMetricResponse(sku=m.sku, units=m.units, revenue=format_money(m.revenue), stock=m.stock)
            for m in stats.sku_metrics
        ],
        daily_orders=[
            DailyOrderStatsResponse(
                date=day.date,
                orders_placed=day.orders_placed or 0,
                orders_delivered=day.orders_delivered or 0,
                orders_cancelled=day.orders_cancelled or 0,
                orders_reactivated=day.orders_reactivated or 0,
                placed_value=format_money(day.placed_value),
                delivered_revenue=format_money(day.delivered_revenue),
            )
            for day in stats.daily
        ],
    )


@router.get("/vendor/analytics", response_model=VendorAnalyticsResponse)
async def vendor_dashboard(actor: Actor = Depends(current_actor)) -> VendorAnalyticsResponse:
    if not (actor.is_vendor or actor.is_admin):
        raise forbidden("Vendor access required")
    stats = vendor_analytics(owned_store_ids(actor))
    return VendorAnalyticsResponse(
        total_revenue=format_money(stats.total_revenue),
        total_earnings=format_money(stats.total_earnings),
        total_orders=stats.total_orders,
        total_products=stats.total_products,
        total_stores=stats.total_stores,
    )
