"""Integration tests for order placement, fulfilment and cancellation over HTTP."""

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
    "postal_code": "60000",
    "phone": "+92 300 1234567",
}


@pytest.fixture()
def order_id(client, shop):
    _, product_id = shop
    response = client.post(
        "/api/orders",
        json={"items": [{"product_id": product_id, "quantity": 2}], **ADDRESS},
        headers=BUYER,
    )
    assert response.status_code == 201
    return response.json()["order_id"]


class TestPlacement:
    def test_placement_response(self, client, shop):
        _, product_id = shop
        data = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_id, "quantity": 1}], **ADDRESS},
            headers=BUYER,
        ).json()
        assert data["reference"].startswith("PH-")
        assert data["total"] == 1000.0
        assert data["estimated_delivery"] == "3-7 business days"

    def test_anonymous_placement_forbidden(self, client, shop):
        _, product_id = shop
        response = client.post("/api/orders", json={"items": [{"product_id": product_id}], **ADDRESS})
        assert response.status_code == 403

    def test_card_payment_rejected(self, client, shop):
        _, product_id = shop
        response = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_id}], "payment_method": "card", **ADDRESS},
            headers=BUYER,
        )
        assert response.status_code == 400
        assert response.json()["error"]["payment_method"] == ["Only cash on delivery is supported"]

    def test_order_from_cart(self, client, shop):
        _, product_id = shop
        client.post("/api/cart/buyer-001", json={"product_id": product_id, "quantity": 3}, headers=BUYER)
        response = client.post("/api/orders", json={"from_cart": True, **ADDRESS}, headers=BUYER)
        assert response.status_code == 201
        assert client.get("/api/cart/buyer-001", headers=BUYER).json()["count"] == 0
        assert client.get(f"/api/products/{product_id}").json()["stock"] == 2


class TestOrderAccess:
    def test_buyer_sees_own_order(self, client, order_id):
        data = client.get(f"/api/orders/{order_id}", headers=BUYER).json()
        assert data["status"] == "pending"
        assert data["shipping_address"]["city"] == "Multan"
        assert data["items"][0]["quantity"] == 2

    def test_strangers_are_forbidden(self, client, order_id):
        assert client.get(f"/api/orders/{order_id}", headers=OTHER_BUYER).status_code == 403
        assert client.get(f"/api/orders/{order_id}", headers=OTHER_VENDOR).status_code == 403
        assert client.get(f"/api/orders/{order_id}", headers=VENDOR).status_code == 200

    def test_order_history(self, client, order_id):
        data = client.get("/api/buyer/buyer-001/orders", headers=BUYER).json()
        assert data["total"] == 1
        assert data["orders"][0]["order_id"] == order_id
        assert client.get("/api/buyer/buyer-001/orders", headers=OTHER_BUYER).status_code == 403

    def test_vendor_sales(self, client, shop, order_id):
        store_id, _ = shop
        data = client.get(f"/api/vendor/{store_id}/sales", headers=VENDOR).json()
        assert data["order_count"] == 1
        assert data["gross_amount"] == 2000.0


class TestFulfilment:
    def test_vendor_runs_the_order_through(self, client, order_id):
        client.put(f"/api/orders/{order_id}/status", json={"status": "processing"}, headers=VENDOR)
        client.put(
            f"/api/orders/{order_id}/status",
            json={"status": "shipped", "tracking_number": "TCS-42", "courier_service": "TCS"},
            headers=VENDOR,
        )
        receipt = client.post(f"/api/orders/{order_id}/cod/collect", headers=VENDOR).json()["receipt_id"]
        response = client.put(f"/api/orders/{order_id}/status", json={"status": "delivered"}, headers=VENDOR)
        assert response.status_code == 200

        data = client.get(f"/api/orders/{order_id}", headers=BUYER).json()
        assert data["status"] == "delivered"
        assert data["cod_receipt_id"] == receipt

    def test_buyer_cannot_advance(self, client, order_id):
        response = client.put(f"/api/orders/{order_id}/status", json={"status": "processing"}, headers=BUYER)
        assert response.status_code == 403


class TestCancellation:
    def test_buyer_cancels(self, client, shop, order_id):
        _, product_id = shop
        response = client.post(f"/api/orders/{order_id}/cancel", json={"reason": "Ordered twice"}, headers=BUYER)
        assert response.status_code == 200

        data = client.get(f"/api/orders/{order_id}", headers=BUYER).json()
        assert data["status"] == "cancelled"
        assert data["cancelled_by"] == "buyer"
        assert client.get(f"/api/products/{product_id}").json()["stock"] == 5

    def test_reason_required(self, client, order_id):
        response = client.post(f"/api/orders/{order_id}/cancel", json={}, headers=BUYER)
        assert response.status_code == 400

    def test_vendor_reactivates(self, client, order_id):
        client.post(f"/api/orders/{order_id}/cancel", json={"reason": "Unreachable"}, headers=VENDOR)
        assert client.post(f"/api/orders/{order_id}/reactivate", headers=BUYER).status_code == 403
        assert client.post(f"/api/orders/{order_id}/reactivate", headers=VENDOR).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=BUYER).json()["status"] == "pending"
