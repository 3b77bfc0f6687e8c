"""Domain events for the Order aggregate.

Events are persisted to the event store and used for:
- Rebuilding aggregate state via @apply (event sourcing)
- Updating the buyer, vendor and purchase projections
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A buyer placed a cash-on-delivery order."""

    __version__ = 1

    order_id: Identifier(required=True)
    reference: String(required=True)
    buyer_id: Identifier(required=True)
    items: Text(required=True)  # JSON: list of item dicts
    shipping_address: Text(required=True)  # JSON: address dict
    subtotal: Float(required=True)
    offer_savings: Float()
    discount: Float()
    tax: Float()
    shipping: Float()
    total: Float(required=True)
    currency: String(default="PKR")
    tax_details: Text()  # JSON: list of tax lines
    discount_details: Text()  # JSON: list of applied promotions
    shipping_method: String()
    carrier: String()
    payment_method: String(required=True)
    estimated_delivery: String()
    placed_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderProcessing:
    __version__ = 1

    order_id: Identifier(required=True)
    processing_estimate: String()
    started_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id: Identifier(required=True)
    tracking_number: String(required=True)
    courier_service: String(required=True)
    shipped_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id: Identifier(required=True)
    delivered_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class CodPaymentCollected:
    """The courier handed over the cash for a COD order."""

    __version__ = 1

    order_id: Identifier(required=True)
    receipt_id: String(required=True)
    collected_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its items returned to stock."""

    __version__ = 1

    order_id: Identifier(required=True)
    reason: String(required=True)
    cancelled_by: String(required=True)
    cod_receipt_id: String()
    cancelled_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderReactivated:
    """A cancelled order was put back to pending and its stock re-reserved."""

    __version__ = 1

    order_id: Identifier(required=True)
    reactivated_by: Identifier()
    reactivated_at: DateTime(required=True)
