import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers

ADMIN = {"actor-id": "admin-001", "actor-role": "admin"}
VENDOR = {"actor-id": "vendor-001", "actor-role": "vendor"}
BUYER = {"actor-id": "buyer-001", "actor-role": "buyer"}


@pytest.fixture()
def client():
    from marketplace.api import routers

    app = FastAPI()
    for router in routers:
        app.include_router(router, prefix="/api")
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def shop(client):
    """An approved store owned by vendor-001 with one approved vase in stock."""
    store_id = client.post(
        "/api/stores",
        json={"name": "Multan Blue Crafts", "district": "Multan", "gi_brands": ["Multani Blue Pottery"]},
        headers=VENDOR,
    ).json()["id"]
    client.put(f"/api/admin/stores/{store_id}/status", json={"status": "approved"}, headers=ADMIN)

    product_id = client.post(
        "/api/products",
        json={
            "store_id": store_id,
            "title": "Multani Blue Pottery Vase",
            "price": 1000.0,
            "stock": 5,
            "district": "Multan",
            "gi_brand": "Multani Blue Pottery",
            "weight_kg": 1.0,
        },
        headers=VENDOR,
    ).json()["id"]
    client.put(f"/api/admin/products/{product_id}/status", json={"status": "approved"}, headers=ADMIN)
    return store_id, product_id
