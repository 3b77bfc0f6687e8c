"""Application tests for PlaceOrder — the cash-on-delivery checkout."""

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.management import AddToCart
from marketplace.catalogue.product import Product
from marketplace.order.cancellation import CancelOrder
from marketplace.order.order import Order
from marketplace.order.placement import PlaceOrder, recent_cancellations
from marketplace.projections.buyer_orders import BuyerOrders, buyer_order_history
from marketplace.projections.purchased_products import has_purchased
from marketplace.projections.vendor_sales import VendorSales, sale_id, store_sales
from marketplace.settings.management import UpdatePlatformSettings
from marketplace.store.management import SetStoreCod
from protean import current_domain
from protean.exceptions import ValidationError

BUYER = "buyer-001"


def _place(items=None, **overrides):
    fields = {
        "buyer_id": BUYER,
        "items": items or [],
        "street": "House 12, Street 4",
        "city": "Multan",
        "province": "Punjab",
        "postal_code": "60000",
        "phone": "+92 300 1234567",
    }
    fields.update(overrides)
    return current_domain.process(PlaceOrder(**fields), asynchronous=False)


@pytest.fixture()
def store_id(make_store):
    return make_store()


@pytest.fixture()
def vase(store_id, make_product):
    return make_product(store_id, price=1000.0, stock=5)


class TestPlaceOrder:
    def test_order_recorded(self, vase):
        order_id = _place([{"product_id": vase, "quantity": 2}])
        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "pending"
        assert order.buyer_id == BUYER
        assert order.items[0].unit_price == 1000.0
        assert order.pricing.subtotal == 2000.0
        assert order.shipping_address.phone == "+92 300 1234567"

    def test_stock_withdrawn(self, vase):
        _place([{"product_id": vase, "quantity": 2}])
        assert current_domain.repository_for(Product).get(vase).stock == 3

    def test_client_prices_are_ignored(self, vase):
        order_id = _place([{"product_id": vase, "quantity": 1, "unit_price": 1.0}])
        assert current_domain.repository_for(Order).get(order_id).items[0].unit_price == 1000.0

    def test_from_cart_clears_cart(self, vase):
        current_domain.process(AddToCart(buyer_id=BUYER, product_id=vase, quantity=2), asynchronous=False)
        order_id = _place(from_cart=True)
        assert current_domain.repository_for(Order).get(order_id).items[0].quantity == 2
        assert current_domain.repository_for(Cart).get(BUYER).count == 0

    def test_direct_order_leaves_cart_alone(self, vase):
        current_domain.process(AddToCart(buyer_id=BUYER, product_id=vase, quantity=1), asynchronous=False)
        _place([{"product_id": vase, "quantity": 1}])
        assert current_domain.repository_for(Cart).get(BUYER).count == 1


class TestPlacementChecks:
    def test_items_required(self):
        with pytest.raises(ValidationError) as exc:
            _place([])
        assert exc.value.messages["items"] == ["Items required"]

    def test_only_cod(self, vase):
        with pytest.raises(ValidationError):
            _place([{"product_id": vase, "quantity": 1}], payment_method="card")

    def test_incomplete_address(self, vase):
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 1}], city="")
        assert "city" in exc.value.messages

    def test_short_phone(self, vase):
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 1}], phone="12345")
        assert "phone" in exc.value.messages

    def test_insufficient_stock_counts_repeated_lines(self, vase):
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 3}, {"product_id": vase, "quantity": 3}])
        assert exc.value.messages["quantity"] == ["Insufficient stock for product"]

    def test_unapproved_product(self, store_id, make_product):
        product_id = make_product(store_id, status="pending")
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": product_id, "quantity": 1}])
        assert exc.value.messages["product_id"] == ["Product not available"]

    def test_store_without_cod(self, store_id, vase):
        current_domain.process(SetStoreCod(store_id=store_id, enabled=False), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 1}])
        assert exc.value.messages["payment_method"] == ["COD not available for selected items"]

    def test_cod_limit(self, vase):
        current_domain.process(UpdatePlatformSettings(cod_limit=1500.0), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 2}])
        assert exc.value.messages["payment_method"] == ["COD not available for high-value orders"]
        assert current_domain.repository_for(Product).get(vase).stock == 5

    def test_strict_risk_check(self, vase):
        current_domain.process(UpdatePlatformSettings(strict_cod_risk_check=True), asynchronous=False)
        for _ in range(2):
            order_id = _place([{"product_id": vase, "quantity": 1}])
            current_domain.process(
                CancelOrder(order_id=order_id, reason="Not home", cancelled_by="buyer"), asynchronous=False
            )
        assert recent_cancellations(BUYER) == 2

        with pytest.raises(ValidationError) as exc:
            _place([{"product_id": vase, "quantity": 1}])
        assert "2 cancellations in 30 days" in exc.value.messages["payment_method"][0]

    def test_risk_check_off_by_default(self, vase):
        for _ in range(2):
            order_id = _place([{"product_id": vase, "quantity": 1}])
            current_domain.process(
                CancelOrder(order_id=order_id, reason="Not home", cancelled_by="buyer"), asynchronous=False
            )
        assert _place([{"product_id": vase, "quantity": 1}])


class TestOrderProjections:
    def test_buyer_orders(self, vase):
        order_id = _place([{"product_id": vase, "quantity": 2}])
        row = current_domain.repository_for(BuyerOrders).get(order_id)
        assert row.status == "pending"
        assert row.item_count == 2
        assert row.reference.startswith("PH-")
        assert [r.order_id for r in buyer_order_history(BUYER)] == [order_id]

    def test_vendor_sales_split_by_store(self, make_store, make_product, store_id, vase):
        other_store = make_store(vendor_id="vendor-002", name="Hala Ajrak House", district="Hala")
        shawl = make_product(other_store, title="Ajrak Shawl", price=2800.0)
        order_id = _place([{"product_id": vase, "quantity": 1}, {"product_id": shawl, "quantity": 2}])

        repo = current_domain.repository_for(VendorSales)
        assert repo.get(sale_id(store_id, order_id)).gross_amount == 1000.0
        assert repo.get(sale_id(other_store, order_id)).gross_amount == 5600.0
        assert [s.order_id for s in store_sales(other_store)] == [order_id]

    def test_purchase_recorded(self, vase):
        _place([{"product_id": vase, "quantity": 1}])
        assert has_purchased(BUYER, vase)
        assert not has_purchased("someone-else", vase)
