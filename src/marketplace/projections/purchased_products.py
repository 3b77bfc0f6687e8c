"""Purchased products — buyer and product pairs behind verified reviews."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced
from marketplace.order.order import Order


def purchase_id(buyer_id, product_id) -> str:
    return f"{buyer_id}:{product_id}"


@marketplace.projection
class PurchasedProducts:
    purchase_id: Identifier(identifier=True, required=True)
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    first_order_id: Identifier()
    purchased_at: DateTime()


@marketplace.projector(projector_for=PurchasedProducts, aggregates=[Order])
class PurchasedProductsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        repo = current_domain.repository_for(PurchasedProducts)
        for product_id in {str(item["product_id"]) for item in items}:
            if has_purchased(event.buyer_id, product_id):
                continue
            repo.add(
                PurchasedProducts(
                    purchase_id=purchase_id(event.buyer_id, product_id),
                    buyer_id=event.buyer_id,
                    product_id=product_id,
                    first_order_id=event.order_id,
                    purchased_at=event.placed_at,
                )
            )


def has_purchased(buyer_id, product_id) -> bool:
    try:
        current_domain.repository_for(PurchasedProducts).get(purchase_id(buyer_id, product_id))
    except ObjectNotFoundError:
        return False
    return True
