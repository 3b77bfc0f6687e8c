"""BDD tests for the cash-on-delivery order lifecycle."""

import pytest
from marketplace.catalogue.product import Product
from marketplace.order.cancellation import CancelOrder, ReactivateOrder
from marketplace.order.lifecycle import AdvanceOrder
from marketplace.order.order import Order
from marketplace.order.payment import CollectCodPayment
from marketplace.order.placement import PlaceOrder
from marketplace.settings.management import UpdatePlatformSettings
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_lifecycle.feature")


@pytest.fixture()
def placed():
    return {"order_id": None}


def _attempt(error, command):
    try:
        return current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc
        return None


@given(parsers.cfparse("the COD limit is {limit:g}"))
def cod_limit(limit):
    current_domain.process(UpdatePlatformSettings(cod_limit=float(limit)), asynchronous=False)


@when(parsers.cfparse("the buyer orders {quantity:d} units"))
def buyer_orders(product_id, quantity, placed, error):
    placed["order_id"] = _attempt(
        error,
        PlaceOrder(
            buyer_id="buyer-001",
            items=[{"product_id": product_id, "quantity": quantity}],
            street="House 12, Street 4",
            city="Multan",
            province="Punjab",
            phone="+92 300 1234567",
        ),
    )


@when("the vendor starts processing the order")
def start_processing(placed, error):
    _attempt(error, AdvanceOrder(order_id=placed["order_id"], status="processing"))


@when(parsers.cfparse('the vendor ships it with "{courier}" under tracking number "{tracking}"'))
def ship(placed, error, courier, tracking):
    _attempt(
        error,
        AdvanceOrder(order_id=placed["order_id"], status="shipped", tracking_number=tracking, courier_service=courier),
    )


@when("the courier collects the cash")
def collect_cash(placed, error):
    _attempt(error, CollectCodPayment(order_id=placed["order_id"]))


@when("the order is marked delivered")
def deliver(placed, error):
    _attempt(error, AdvanceOrder(order_id=placed["order_id"], status="delivered"))


@when(parsers.cfparse('the buyer cancels because "{reason}"'))
def cancel(placed, error, reason):
    _attempt(error, CancelOrder(order_id=placed["order_id"], reason=reason, cancelled_by="buyer"))


@when("the order is reactivated")
def reactivate(placed, error):
    _attempt(error, ReactivateOrder(order_id=placed["order_id"], reactivated_by="admin-001"))


@then(parsers.cfparse('the order is "{status}"'))
def order_status(placed, status):
    assert current_domain.repository_for(Order).get(placed["order_id"]).status == status


@then(parsers.cfparse("{stock:d} units remain in stock"))
def remaining_stock(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock
