"""Buyer orders — one row per order for a buyer's order history."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import (
    CodPaymentCollected,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderProcessing,
    OrderReactivated,
    OrderShipped,
)
from marketplace.order.order import CANCELLED_RECEIPT, CodPaymentStatus, Order, OrderStatus


@marketplace.projection
class BuyerOrders:
    order_id: Identifier(identifier=True, required=True)
    buyer_id: Identifier(required=True)
    reference: String(max_length=20)
    status: String(required=True)
    total: Float()
    item_count: Integer(default=0)
    payment_method: String()
    cod_payment_status: String(default=CodPaymentStatus.PENDING.value)
    cod_receipt_id: String(max_length=50)
    tracking_number: String()
    placed_at: DateTime()
    cancelled_at: DateTime()
    updated_at: DateTime()


@marketplace.projector(projector_for=BuyerOrders, aggregates=[Order])
class BuyerOrdersProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(BuyerOrders).add(
            BuyerOrders(
                order_id=event.order_id,
                buyer_id=event.buyer_id,
                reference=event.reference,
                status=OrderStatus.PENDING.value,
                total=event.total,
                payment_method=event.payment_method,
                item_count=sum(int(item.get("quantity", 0)) for item in items),
                placed_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at, **changes):
        repo = current_domain.repository_for(BuyerOrders)
        row = repo.get(order_id)
        for name, value in changes.items():
            setattr(row, name, value)
        row.updated_at = updated_at
        repo.add(row)

    @on(OrderProcessing)
    def on_order_processing(self, event):
        self._update(event.order_id, event.started_at, status=OrderStatus.PROCESSING.value)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update(
            event.order_id,
            event.shipped_at,
            status=OrderStatus.SHIPPED.value,
            tracking_number=event.tracking_number,
        )

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update(event.order_id, event.delivered_at, status=OrderStatus.DELIVERED.value)

    @on(CodPaymentCollected)
    def on_cod_payment_collected(self, event):
        self._update(
            event.order_id,
            event.collected_at,
            cod_payment_status=CodPaymentStatus.COLLECTED.value,
            cod_receipt_id=event.receipt_id,
        )

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        row = current_domain.repository_for(BuyerOrders).get(event.order_id)
        changes = {"status": OrderStatus.CANCELLED.value, "cancelled_at": event.cancelled_at}
        if event.cod_receipt_id:
            changes["cod_payment_status"] = CodPaymentStatus.COLLECTED.value
            changes["cod_receipt_id"] = row.cod_receipt_id or event.cod_receipt_id
        self._update(event.order_id, event.cancelled_at, **changes)

    @on(OrderReactivated)
    def on_order_reactivated(self, event):
        row = current_domain.repository_for(BuyerOrders).get(event.order_id)
        changes = {"status": OrderStatus.PENDING.value}
        if row.cod_receipt_id == CANCELLED_RECEIPT:
            changes.update(cod_payment_status=CodPaymentStatus.PENDING.value, cod_receipt_id=None)
        self._update(event.order_id, event.reactivated_at, **changes)


def buyer_order_history(buyer_id) -> list:
    """The buyer's orders, newest first."""
    return (
        current_domain.repository_for(BuyerOrders)
        ._dao.query.filter(buyer_id=str(buyer_id))
        .order_by("-placed_at")
        .limit(None)
        .all()
        .items
    )


def all_orders(status=None, page=1, page_size=None):
    """Every buyer's orders, newest first, optionally narrowed to one status."""
    query = current_domain.repository_for(BuyerOrders)._dao.query
    if status:
        query = query.filter(status=status)
    query = query.order_by("-placed_at")
    if page_size:
        query = query.offset((page - 1) * page_size)
    return query.limit(page_size).all()
