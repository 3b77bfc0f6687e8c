"""Order cancellation and reactivation — commands and handler.

Cancelling puts the ordered units back on the shelf; reactivating takes
them off again, so both sides touch the catalogue in the same unit of work.
"""

from collections import Counter

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import logger, marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id: Identifier(required=True)
    reason: String(max_length=500)
    cancelled_by: String(required=True, max_length=20)


@marketplace.command(part_of="Order")
class ReactivateOrder:
    order_id: Identifier(required=True)
    reactivated_by: Identifier()


def _ordered_units(order) -> Counter:
    units = Counter()
    for item in order.items:
        units[(str(item.product_id), item.variant_sku or None)] += item.quantity
    return units


@marketplace.command_handler(part_of=Order)
class OrderCancellationHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        repo.add(order)

        product_repo = current_domain.repository_for(Product)
        for (product_id, variant_sku), quantity in _ordered_units(order).items():
            product = product_repo.get(product_id)
            product.restock(quantity, variant_sku)
            product_repo.add(product)

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            cancelled_by=command.cancelled_by,
            restocked_lines=len(order.items),
        )

    @handle(ReactivateOrder)
    def reactivate_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.reactivate(reactivated_by=command.reactivated_by)

        product_repo = current_domain.repository_for(Product)
        units = _ordered_units(order)
        products = {}
        for (product_id, variant_sku), quantity in units.items():
            product = products.get(product_id) or product_repo.get(product_id)
            products[product_id] = product
            if product.available_stock(variant_sku) < quantity:
                raise ValidationError({"stock": ["Insufficient stock to reactivate"]})

        repo.add(order)
        for (product_id, variant_sku), quantity in units.items():
            products[product_id].withdraw_stock(quantity, variant_sku)
        for product in products.values():
            product_repo.add(product)

        logger.info("order_reactivated", order_id=str(order.id), reactivated_by=command.reactivated_by)
