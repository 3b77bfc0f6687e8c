"""Daily order stats — the admin dashboard's order timeline.

One row per day (YYYY-MM-DD) counting orders placed, delivered and
cancelled, with the value placed and the revenue delivered that day.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderCancelled, OrderDelivered, OrderPlaced, OrderReactivated
from marketplace.order.order import Order
from marketplace.projections.buyer_orders import BuyerOrders


@marketplace.projection
class DailyOrderStats:
    date: String(identifier=True, required=True, max_length=10)
    orders_placed: Integer(default=0)
    orders_delivered: Integer(default=0)
    orders_cancelled: Integer(default=0)
    orders_reactivated: Integer(default=0)
    placed_value: Float(default=0.0)
    delivered_revenue: Float(default=0.0)


def _get_or_create(date_key):
    try:
        return current_domain.repository_for(DailyOrderStats).get(date_key)
    except ObjectNotFoundError:
        return DailyOrderStats(date=date_key)


def _order_total(order_id) -> float:
    # Delivery events carry no amount; the order summary has it
    return current_domain.repository_for(BuyerOrders).get(order_id).total or 0.0


@marketplace.projector(projector_for=DailyOrderStats, aggregates=[Order])
class DailyOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        record.placed_value = (record.placed_value or 0.0) + (event.total or 0.0)
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record = _get_or_create(event.delivered_at.date().isoformat())
        record.orders_delivered = (record.orders_delivered or 0) + 1
        record.delivered_revenue = (record.delivered_revenue or 0.0) + _order_total(event.order_id)
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.cancelled_at.date().isoformat())
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderReactivated)
    def on_order_reactivated(self, event):
        record = _get_or_create(event.reactivated_at.date().isoformat())
        record.orders_reactivated = (record.orders_reactivated or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)


def daily_order_stats(limit=30) -> list:
    """The most recent days first."""
    return (
        current_domain.repository_for(DailyOrderStats)
        ._dao.query.order_by("-date")
        .limit(limit)
        .all()
        .items
    )
