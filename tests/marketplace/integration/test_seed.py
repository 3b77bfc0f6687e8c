from manage import DEMO_PRODUCTS, seed_catalogue
from marketplace.catalogue.browse import browse_products
from marketplace.checkout.calculator import CheckoutCalculator, CheckoutLine
from marketplace.store.store import Store
from protean import current_domain


def test_seed_catalogue():
    seeded = seed_catalogue("vendor-demo")

    store = current_domain.repository_for(Store).get(seeded["store_id"])
    assert store.is_cod_ready
    assert len(seeded["products"]) == len(DEMO_PRODUCTS)
    assert browse_products().total == len(DEMO_PRODUCTS)


def test_seeded_promotion_gives_free_shipping_on_large_orders():
    seeded = seed_catalogue("vendor-demo")
    shawl = seeded["products"][1]

    small = CheckoutCalculator().quote([CheckoutLine(product_id=shawl, quantity=1)])
    large = CheckoutCalculator().quote([CheckoutLine(product_id=shawl, quantity=4)])
    assert small.discount == 0
    assert large.shipping > 0
    assert large.discount == large.shipping
