"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from marketplace.catalogue.listing import ChangeProductStatus, ListProduct
from marketplace.store.management import ChangeStoreStatus, OpenStore
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given(
    parsers.cfparse('an approved store selling "{title}" at {price:g} with {stock:d} in stock'),
    target_fixture="product_id",
)
def store_with_product(title, price, stock):
    store_id = current_domain.process(
        OpenStore(
            vendor_id="vendor-001",
            name="Multan Blue Crafts",
            district="Multan",
            gi_brands=["Multani Blue Pottery"],
        ),
        asynchronous=False,
    )
    current_domain.process(ChangeStoreStatus(store_id=store_id, status="approved"), asynchronous=False)
    product_id = current_domain.process(
        ListProduct(
            store_id=store_id,
            title=title,
            price=float(price),
            stock=stock,
            district="Multan",
            gi_brand="Multani Blue Pottery",
            weight_kg=1.0,
        ),
        asynchronous=False,
    )
    current_domain.process(ChangeProductStatus(product_id=product_id, status="approved"), asynchronous=False)
    return product_id


@then(parsers.cfparse('the action fails with "{message}"'))
def action_fails_with(error, message):
    assert isinstance(error["exc"], ValidationError)
    assert message in [m for messages in error["exc"].messages.values() for m in messages]
