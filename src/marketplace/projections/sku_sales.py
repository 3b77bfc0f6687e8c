"""SKU sales — units and revenue per variant SKU across all placed orders."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced
from marketplace.order.order import Order
from marketplace.pricing.money import round_money, to_decimal


@marketplace.projection
class SkuSales:
    sku: String(identifier=True, required=True, max_length=100)
    product_id: Identifier()
    units: Integer(default=0)
    revenue: Float(default=0.0)


@marketplace.projector(projector_for=SkuSales, aggregates=[Order])
class SkuSalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        repo = current_domain.repository_for(SkuSales)

        for item in items:
            sku = item.get("variant_sku")
            if not sku:
                continue

            try:
                record = repo.get(sku)
            except ObjectNotFoundError:
                record = SkuSales(sku=sku, product_id=item["product_id"])

            quantity = int(item["quantity"])
            revenue = to_decimal(record.revenue) + to_decimal(item["unit_price"]) * quantity
            record.units = (record.units or 0) + quantity
            record.revenue = float(round_money(revenue))
            repo.add(record)


def all_sku_sales() -> list:
    return current_domain.repository_for(SkuSales)._dao.query.order_by("-units").limit(None).all().items
