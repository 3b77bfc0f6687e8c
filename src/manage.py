"""Sanatzar management CLI.

Seeds the configured stores with a small demo catalogue: a vendor with an
approved store, a few GI-branded products, a tax rule, a shipping rate and
a platform promotion.

Usage:
    python src/manage.py seed
    python src/manage.py seed --vendor-email vendor@example.pk
"""

import argparse
import sys
from datetime import UTC, datetime, timedelta

DEMO_PRODUCTS = [
    {
        "title": "Multani Blue Pottery Vase",
        "price": 3200.0,
        "stock": 15,
        "district": "Multan",
        "gi_brand": "Multani Blue Pottery",
        "weight_kg": 1.5,
    },
    {
        "title": "Ajrak Shawl",
        "price": 2800.0,
        "stock": 25,
        "district": "Hala",
        "gi_brand": "Sindhi Ajrak",
        "weight_kg": 0.4,
    },
    {
        "title": "Peshawari Chappal",
        "price": 4500.0,
        "stock": 0,
        "district": "Peshawar",
        "gi_brand": "Peshawari Chappal",
        "weight_kg": 0.9,
        "variants": [
            {"sku": "CHAPPAL-42", "attributes": {"size": "42"}, "stock": 6},
            {"sku": "CHAPPAL-44", "attributes": {"size": "44"}, "price": 4800.0, "stock": 4},
        ],
    },
]


def register_demo_vendor(vendor_email):
    """Register the demo vendor in the active identity context."""
    from protean.utils.globals import current_domain

    from identity.user.registration import RegisterUser

    return current_domain.process(
        RegisterUser(email=vendor_email, first_name="Demo", last_name="Vendor", role="vendor"),
        asynchronous=False,
    )


def seed_catalogue(vendor_id) -> dict:
    """Create the demo store, catalogue and pricing rules in the active marketplace context."""
    from protean.utils.globals import current_domain

    from marketplace.catalogue.listing import ChangeProductStatus, ListProduct
    from marketplace.promotion.management import CreatePromotion
    from marketplace.settings.management import CreateShippingRule, CreateTaxRule
    from marketplace.store.management import ChangeStoreStatus, OpenStore

    seeded = {"vendor_id": vendor_id, "products": []}
    store_id = current_domain.process(
        OpenStore(
            vendor_id=vendor_id,
            name="Sanatzar Demo Crafts",
            district="Multan",
            gi_brands=[p["gi_brand"] for p in DEMO_PRODUCTS],
        ),
        asynchronous=False,
    )
    current_domain.process(ChangeStoreStatus(store_id=store_id, status="approved"), asynchronous=False)
    seeded["store_id"] = store_id

    for spec in DEMO_PRODUCTS:
        product_id = current_domain.process(ListProduct(store_id=store_id, **spec), asynchronous=False)
        current_domain.process(ChangeProductStatus(product_id=product_id, status="approved"), asynchronous=False)
        seeded["products"].append(product_id)

    current_domain.process(CreateTaxRule(name="GST", rate=17.0, priority=1), asynchronous=False)
    current_domain.process(
        CreateShippingRule(name="Standard up to 5 kg", max_weight_kg=5.0, base_rate=250.0, per_kg_rate=50.0),
        asynchronous=False,
    )
    now = datetime.now(UTC)
    seeded["promotion_id"] = current_domain.process(
        CreatePromotion(
            name="Free shipping over 10,000",
            priority=1,
            start_at=now,
            end_at=now + timedelta(days=30),
            rules=[{"rule_type": "min_order_value", "operator": "gte", "value": 10000}],
            actions=[{"action_type": "free_shipping"}],
        ),
        asynchronous=False,
    )
    return seeded


def seed_demo_data(vendor_email="vendor@sanatzar.pk"):
    """Initialise both domains, create the demo records and return their identifiers."""
    from identity.domain import identity
    from marketplace.domain import marketplace

    identity.init()
    marketplace.init()

    with identity.domain_context():
        vendor_id = register_demo_vendor(vendor_email)
    with marketplace.domain_context():
        return seed_catalogue(vendor_id)


def main():
    parser = argparse.ArgumentParser(description="Sanatzar management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Create demo catalogue data")
    seed_parser.add_argument(
        "--vendor-email",
        default="vendor@sanatzar.pk",
        help="Email of the demo vendor account (default: vendor@sanatzar.pk)",
    )

    args = parser.parse_args()

    from marketplace.utils.logging import configure_logging

    configure_logging()

    if args.command == "seed":
        seeded = seed_demo_data(vendor_email=args.vendor_email)
        print(f"Vendor:   {seeded['vendor_id']}")
        print(f"Store:    {seeded['store_id']}")
        print(f"Products: {len(seeded['products'])}")
        print("Done.")


if __name__ == "__main__":
    sys.exit(main())
