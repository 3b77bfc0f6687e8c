"""Application tests for the dashboards, order timeline, SKU sales and search suggestions."""

from decimal import Decimal

import pytest
from marketplace.catalogue.browse import suggest_products
from marketplace.catalogue.categories import CreateProductCategory
from marketplace.catalogue.listing import ToggleProductActive
from marketplace.order.cancellation import CancelOrder, ReactivateOrder
from marketplace.order.lifecycle import AdvanceOrder
from marketplace.order.payment import CollectCodPayment
from marketplace.order.placement import PlaceOrder
from marketplace.projections.daily_order_stats import daily_order_stats
from marketplace.projections.sku_sales import SkuSales, all_sku_sales
from marketplace.reporting.analytics import platform_analytics, vendor_analytics
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _place(product_id, quantity=2, buyer_id="buyer-001", variant_sku=None):
    item = {"product_id": product_id, "quantity": quantity}
    if variant_sku:
        item["variant_sku"] = variant_sku
    return _process(
        PlaceOrder(
            buyer_id=buyer_id,
            items=[item],
            street="House 12, Street 4",
            city="Multan",
            province="Punjab",
            phone="+92 300 1234567",
        )
    )


def _deliver(order_id):
    _process(AdvanceOrder(order_id=order_id, status="processing"))
    _process(AdvanceOrder(order_id=order_id, status="shipped", tracking_number="TCS-1", courier_service="TCS"))
    _process(CollectCodPayment(order_id=order_id))
    _process(AdvanceOrder(order_id=order_id, status="delivered"))


@pytest.fixture()
def store_id(make_store):
    return make_store()


@pytest.fixture()
def vase(store_id, make_product):
    return make_product(store_id)


class TestDailyOrderStats:
    def test_counts_and_values_for_the_day(self, vase):
        delivered = _place(vase)
        cancelled = _place(vase, quantity=1)
        _deliver(delivered)
        _process(CancelOrder(order_id=cancelled, reason="Not home", cancelled_by="buyer"))
        _process(ReactivateOrder(order_id=cancelled))

        [today] = daily_order_stats()
        assert today.orders_placed == 2
        assert today.orders_delivered == 1
        assert today.orders_cancelled == 1
        assert today.orders_reactivated == 1
        assert today.placed_value == 3000.0
        assert today.delivered_revenue == 2000.0

    def test_no_orders_no_days(self):
        assert daily_order_stats() == []


class TestSkuSales:
    def test_units_and_revenue_per_variant(self, store_id, make_product):
        chappal = make_product(
            store_id,
            title="Peshawari Chappal",
            stock=0,
            variants=[
                {"sku": "CHAPPAL-42", "attributes": {"size": "42"}, "stock": 6},
                {"sku": "CHAPPAL-44", "attributes": {"size": "44"}, "price": 4800.0, "stock": 4},
            ],
        )
        _place(chappal, quantity=2, variant_sku="CHAPPAL-44")
        _place(chappal, quantity=1, variant_sku="CHAPPAL-44", buyer_id="buyer-002")
        _place(chappal, quantity=1, variant_sku="CHAPPAL-42")

        record = current_domain.repository_for(SkuSales).get("CHAPPAL-44")
        assert record.units == 3
        assert record.revenue == 14400.0
        assert record.product_id == chappal
        assert [row.sku for row in all_sku_sales()] == ["CHAPPAL-44", "CHAPPAL-42"]

    def test_plain_products_are_not_tracked(self, vase):
        _place(vase)
        assert all_sku_sales() == []


class TestPlatformAnalytics:
    def test_dashboard(self, make_store, make_product, store_id, vase):
        hala = make_store(vendor_id="vendor-002", name="Hala Ajrak House", district="Hala", status="pending")
        make_product(store_id, title="Pending vase", status="pending")
        make_product(hala, title="Ajrak Shawl", district="Hala", gi_brand="Sindhi Ajrak")

        delivered = _place(vase)
        _place(vase, quantity=1)
        cancelled = _place(vase, quantity=1, buyer_id="buyer-002")
        _deliver(delivered)
        _process(CancelOrder(order_id=cancelled, reason="Changed my mind", cancelled_by="buyer"))

        stats = platform_analytics()
        assert stats.total_products == 3
        assert stats.total_stores == 2
        assert stats.total_orders == 3
        assert stats.total_revenue == Decimal("2000.00")
        assert stats.received_orders_value == Decimal("1000.00")
        assert stats.pending_stores == 1
        assert stats.pending_products == 1
        assert stats.cod_orders == 3
        assert stats.cod_delivered == 1
        assert stats.stores_by_district == {"Multan": 1, "Hala": 1}
        assert stats.top_gi_brands[0] == {"brand": "Multani Blue Pottery", "count": 2}
        assert stats.daily[0].orders_placed == 3

    def test_sku_metrics_report_remaining_stock(self, store_id, make_product):
        chappal = make_product(
            store_id,
            title="Peshawari Chappal",
            stock=0,
            variants=[{"sku": "CHAPPAL-42", "attributes": {"size": "42"}, "stock": 6}],
        )
        _place(chappal, quantity=2, variant_sku="CHAPPAL-42")

        [metric] = platform_analytics().sku_metrics
        assert metric.sku == "CHAPPAL-42"
        assert metric.units == 2
        assert metric.revenue == Decimal("2000.00")
        assert metric.stock == 4

    def test_empty_platform(self):
        stats = platform_analytics()
        assert stats.total_orders == 0
        assert stats.total_revenue == Decimal("0.00")
        assert stats.reviews_total == 0
        assert stats.reviews_average == 0.0


class TestVendorAnalytics:
    def test_revenue_counts_delivered_sales_only(self, store_id, vase):
        delivered = _place(vase)
        _place(vase, quantity=1)
        cancelled = _place(vase, quantity=1, buyer_id="buyer-002")
        _deliver(delivered)
        _process(CancelOrder(order_id=cancelled, reason="Changed my mind", cancelled_by="buyer"))

        stats = vendor_analytics([store_id])
        assert stats.total_revenue == Decimal("2000.00")
        assert stats.total_earnings == Decimal("1800.00")
        assert stats.total_orders == 2
        assert stats.total_products == 1
        assert stats.total_stores == 1

    def test_other_vendors_sales_are_not_counted(self, make_store, make_product, vase):
        other = make_store(vendor_id="vendor-002", name="Hala Ajrak House", district="Hala")
        _deliver(_place(vase))

        stats = vendor_analytics([other])
        assert stats.total_revenue == Decimal("0.00")
        assert stats.total_orders == 0

    def test_no_stores(self):
        stats = vendor_analytics([])
        assert stats.total_stores == 0
        assert stats.total_earnings == Decimal("0")


class TestSuggestions:
    def test_title_prefix_matches_come_first(self, store_id, make_product):
        brand_match = make_product(store_id, title="Glazed Plate", gi_brand="Multani Blue Pottery")
        contains_match = make_product(store_id, title="Large Blue Bowl")
        prefix_match = make_product(store_id, title="Blue Pottery Vase")

        suggestions = [card.product_id for card in suggest_products("blue")]
        assert suggestions[0] == prefix_match
        assert set(suggestions[1:]) == {brand_match, contains_match}

    def test_category_names_match(self, store_id, make_product):
        category_id = _process(CreateProductCategory(name="Footwear"))
        chappal = make_product(
            store_id, title="Peshawari Chappal", gi_brand="Peshawari Chappal", category_id=category_id
        )
        assert [card.product_id for card in suggest_products("FOOT")] == [chappal]

    def test_only_approved_active_products(self, store_id, make_product):
        make_product(store_id, title="Pending vase", status="pending")
        hidden = make_product(store_id, title="Hidden vase")
        _process(ToggleProductActive(product_id=hidden))
        assert suggest_products("vase") == []

    def test_limit_is_capped(self, store_id, make_product):
        for n in range(12):
            make_product(store_id, title=f"Vase {n}")
        assert len(suggest_products("vase", limit=50)) == 10
        assert len(suggest_products("vase", limit=3)) == 3

    def test_blank_query(self, vase):
        assert suggest_products("  ") == []
