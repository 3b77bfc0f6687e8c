"""Integration tests for dashboards, order listings and search suggestions over HTTP."""

import pytest

ADMIN = {"actor-id": "admin-001", "actor-role": "admin"}
VENDOR = {"actor-id": "vendor-001", "actor-role": "vendor"}
OTHER_VENDOR = {"actor-id": "vendor-999", "actor-role": "vendor"}
BUYER = {"actor-id": "buyer-001", "actor-role": "buyer"}
OTHER_BUYER = {"actor-id": "buyer-002", "actor-role": "buyer"}

ADDRESS = {
    "street": "House 12, Street 4",
    "city": "Multan",
    "province": "Punjab",
    "phone": "+92 300 1234567",
}


def _place(client, product_id, quantity=1, headers=BUYER):
    response = client.post(
        "/api/orders",
        json={"items": [{"product_id": product_id, "quantity": quantity}], **ADDRESS},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["order_id"]


def _deliver(client, order_id):
    client.put(f"/api/orders/{order_id}/status", json={"status": "processing"}, headers=VENDOR)
    client.put(
        f"/api/orders/{order_id}/status",
        json={"status": "shipped", "tracking_number": "TCS-42", "courier_service": "TCS"},
        headers=VENDOR,
    )
    client.post(f"/api/orders/{order_id}/cod/collect", headers=VENDOR)
    assert client.put(f"/api/orders/{order_id}/status", json={"status": "delivered"}, headers=VENDOR).status_code == 200


@pytest.fixture()
def orders(client, shop):
    """Three orders: one delivered, one pending and one cancelled."""
    _, product_id = shop
    delivered = _place(client, product_id, quantity=2)
    pending = _place(client, product_id)
    cancelled = _place(client, product_id, headers=OTHER_BUYER)
    _deliver(client, delivered)
    client.post(f"/api/orders/{cancelled}/cancel", json={"reason": "Ordered twice"}, headers=VENDOR)
    return delivered, pending, cancelled


class TestAdminOrders:
    def test_lists_every_order(self, client, orders):
        data = client.get("/api/admin/orders", headers=ADMIN).json()
        assert data["total"] == 3
        assert {o["order_id"] for o in data["orders"]} == set(orders)
        assert {o["payment_method"] for o in data["orders"]} == {"cod"}
        assert {o["buyer_id"] for o in data["orders"]} == {"buyer-001", "buyer-002"}

    def test_status_filter(self, client, orders):
        data = client.get("/api/admin/orders", params={"status": "delivered"}, headers=ADMIN).json()
        assert [o["order_id"] for o in data["orders"]] == [orders[0]]
        assert data["total"] == 1

    def test_paging(self, client, orders):
        data = client.get("/api/admin/orders", params={"page": 2, "page_size": 2}, headers=ADMIN).json()
        assert len(data["orders"]) == 1
        assert data["total"] == 3

    @pytest.mark.parametrize("headers", [VENDOR, BUYER, {}])
    def test_admin_only(self, client, orders, headers):
        assert client.get("/api/admin/orders", headers=headers).status_code == 403


class TestVendorOrders:
    def test_sales_across_owned_stores(self, client, shop, orders):
        store_id, _ = shop
        data = client.get("/api/vendor/orders", headers=VENDOR).json()
        assert data["total"] == 3
        assert {o["store_id"] for o in data["orders"]} == {store_id}

    def test_status_filter(self, client, orders):
        data = client.get("/api/vendor/orders", params={"status": "cancelled"}, headers=VENDOR).json()
        assert [o["order_id"] for o in data["orders"]] == [orders[2]]

    def test_vendor_without_stores_sees_nothing(self, client, orders):
        assert client.get("/api/vendor/orders", headers=OTHER_VENDOR).json() == {"orders": [], "total": 0}

    def test_foreign_store_forbidden(self, client, shop, orders):
        store_id, _ = shop
        response = client.get("/api/vendor/orders", params={"store_id": store_id}, headers=OTHER_VENDOR)
        assert response.status_code == 403


class TestAnalytics:
    def test_admin_dashboard(self, client, orders):
        data = client.get("/api/admin/analytics", headers=ADMIN).json()
        assert data["total_orders"] == 3
        assert data["total_revenue"] == "2000.00"
        assert data["received_orders_value"] == "1000.00"
        assert data["cod_orders"] == 3
        assert data["cod_delivered"] == 1
        assert data["stores_by_district"] == {"Multan": 1}
        assert data["top_gi_brands"] == [{"brand": "Multani Blue Pottery", "count": 1}]
        assert data["daily_orders"][0]["orders_placed"] == 3
        assert data["daily_orders"][0]["delivered_revenue"] == "2000.00"

    def test_admin_dashboard_is_admin_only(self, client):
        assert client.get("/api/admin/analytics", headers=VENDOR).status_code == 403

    def test_vendor_dashboard(self, client, orders):
        data = client.get("/api/vendor/analytics", headers=VENDOR).json()
        assert data == {
            "total_revenue": "2000.00",
            "total_earnings": "1800.00",
            "total_orders": 2,
            "total_products": 1,
            "total_stores": 1,
        }

    def test_buyers_have_no_vendor_dashboard(self, client):
        assert client.get("/api/vendor/analytics", headers=BUYER).status_code == 403


class TestSuggestions:
    def test_prefix_matches_first(self, client, shop):
        store_id, product_id = shop
        bowl_id = client.post(
            "/api/products",
            json={
                "store_id": store_id,
                "title": "Glazed Bowl",
                "price": 800.0,
                "stock": 3,
                "district": "Multan",
                "gi_brand": "Multani Blue Pottery",
            },
            headers=VENDOR,
        ).json()["id"]
        client.put(f"/api/admin/products/{bowl_id}/status", json={"status": "approved"}, headers=ADMIN)

        data = client.get("/api/search/suggestions", params={"q": "multani"}).json()
        assert [s["product_id"] for s in data["suggestions"]] == [product_id, bowl_id]

    def test_empty_query(self, client, shop):
        assert client.get("/api/search/suggestions").json() == {"suggestions": []}

    def test_limit_must_be_positive(self, client):
        assert client.get("/api/search/suggestions", params={"q": "vase", "limit": 0}).status_code == 422
