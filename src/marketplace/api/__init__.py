"""Marketplace domain API package."""

from marketplace.api.analytics import router as analytics_router
from marketplace.api.offers import offer_router, promotion_router
from marketplace.api.orders import router as order_router
from marketplace.api.products import category_router, product_router
from marketplace.api.reviews import router as review_router
from marketplace.api.settings import router as settings_router
from marketplace.api.shopping import cart_router, checkout_router, lists_router
from marketplace.api.stores import router as store_router

routers = [
    store_router,
    product_router,
    category_router,
    offer_router,
    promotion_router,
    settings_router,
    checkout_router,
    cart_router,
    lists_router,
    order_router,
    review_router,
    analytics_router,
]

__all__ = ["routers"]
