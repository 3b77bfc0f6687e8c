"""Vendor sales — one row per store and order.

An order can span stores; each store only sees its own lines, so a row
carries the store's item count and gross amount for that order.
"""

import json
from collections import defaultdict

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderProcessing,
    OrderReactivated,
    OrderShipped,
)
from marketplace.order.order import Order, OrderStatus
from marketplace.pricing.money import ZERO, round_money, to_decimal


def sale_id(store_id, order_id) -> str:
    return f"{store_id}:{order_id}"


@marketplace.projection
class VendorSales:
    sale_id: Identifier(identifier=True, required=True)
    store_id: Identifier(required=True)
    order_id: Identifier(required=True)
    reference: String(max_length=20)
    buyer_id: Identifier()
    item_count: Integer(default=0)
    gross_amount: Float(default=0.0)
    status: String(required=True)
    placed_at: DateTime()
    updated_at: DateTime()


@marketplace.projector(projector_for=VendorSales, aggregates=[Order])
class VendorSalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []

        counts = defaultdict(int)
        amounts = defaultdict(lambda: ZERO)
        for item in items:
            store_id = str(item["store_id"])
            counts[store_id] += int(item["quantity"])
            amounts[store_id] += to_decimal(item["unit_price"]) * int(item["quantity"])

        repo = current_domain.repository_for(VendorSales)
        for store_id, count in counts.items():
            repo.add(
                VendorSales(
                    sale_id=sale_id(store_id, event.order_id),
                    store_id=store_id,
                    order_id=event.order_id,
                    reference=event.reference,
                    buyer_id=event.buyer_id,
                    item_count=count,
                    gross_amount=float(round_money(amounts[store_id])),
                    status=OrderStatus.PENDING.value,
                    placed_at=event.placed_at,
                    updated_at=event.placed_at,
                )
            )

    def _update_status(self, order_id, status, updated_at):
        repo = current_domain.repository_for(VendorSales)
        rows = repo._dao.query.filter(order_id=str(order_id)).limit(None).all().items
        for row in rows:
            row.status = status
            row.updated_at = updated_at
            repo.add(row)

    @on(OrderProcessing)
    def on_order_processing(self, event):
        self._update_status(event.order_id, OrderStatus.PROCESSING.value, event.started_at)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update_status(event.order_id, OrderStatus.SHIPPED.value, event.shipped_at)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update_status(event.order_id, OrderStatus.DELIVERED.value, event.delivered_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update_status(event.order_id, OrderStatus.CANCELLED.value, event.cancelled_at)

    @on(OrderReactivated)
    def on_order_reactivated(self, event):
        self._update_status(event.order_id, OrderStatus.PENDING.value, event.reactivated_at)


def store_sales(store_id) -> list:
    return (
        current_domain.repository_for(VendorSales)
        ._dao.query.filter(store_id=str(store_id))
        .order_by("-placed_at")
        .limit(None)
        .all()
        .items
    )


def sales_for_stores(store_ids, status=None) -> list:
    """Sales rows across several stores, newest first."""
    filters = {"store_id__in": [str(store_id) for store_id in store_ids]}
    if status:
        filters["status"] = status
    return (
        current_domain.repository_for(VendorSales)
        ._dao.query.filter(**filters)
        .order_by("-placed_at")
        .limit(None)
        .all()
        .items
    )
