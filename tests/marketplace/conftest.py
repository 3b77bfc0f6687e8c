import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    import marketplace.api  # noqa: F401 -- load the API package before domain traversal, as app.py does
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


@pytest.fixture()
def make_store():
    """Open a store and, unless told otherwise, approve it."""
    from protean import current_domain

    from marketplace.store.management import ChangeStoreStatus, OpenStore

    def _make(vendor_id="vendor-001", status="approved", **overrides):
        fields = {"name": "Multan Blue Crafts", "district": "Multan", "gi_brands": ["Multani Blue Pottery"]}
        fields.update(overrides)
        store_id = current_domain.process(OpenStore(vendor_id=vendor_id, **fields), asynchronous=False)
        if status != "pending":
            current_domain.process(ChangeStoreStatus(store_id=store_id, status=status), asynchronous=False)
        return store_id

    return _make


@pytest.fixture()
def make_product():
    """List a product in a store and, unless told otherwise, approve it."""
    from protean import current_domain

    from marketplace.catalogue.listing import ChangeProductStatus, ListProduct

    def _make(store_id, status="approved", **overrides):
        fields = {
            "title": "Multani Blue Pottery Vase",
            "price": 1000.0,
            "stock": 10,
            "district": "Multan",
            "gi_brand": "Multani Blue Pottery",
            "weight_kg": 1.0,
        }
        fields.update(overrides)
        product_id = current_domain.process(ListProduct(store_id=store_id, **fields), asynchronous=False)
        if status != "pending":
            current_domain.process(ChangeProductStatus(product_id=product_id, status=status), asynchronous=False)
        return product_id

    return _make
