"""Order aggregate (Event Sourced) — a buyer's cash-on-delivery purchase.

All state changes are captured as domain events and the current state is
rebuilt by replaying them through the @apply handlers.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING/PROCESSING → CANCELLED (within 7 days of placement)
    CANCELLED → PENDING (reactivation, within 7 days of cancellation)

Cash is collected by the courier; delivery can only be recorded once the
collection has been logged.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

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
from marketplace.pricing.clock import as_utc

CANCELLATION_WINDOW = timedelta(days=7)
REACTIVATION_WINDOW = timedelta(days=7)
COD_ESTIMATED_DELIVERY = "3-7 business days"
CANCELLED_RECEIPT = "CANCELLED"
PAYMENT_COD = "cod"


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CodPaymentStatus(Enum):
    PENDING = "pending"
    COLLECTED = "collected"


class CancellationActor(Enum):
    ADMIN = "admin"
    BUYER = "buyer"
    VENDOR = "vendor"


# State machine transition map for fulfilment
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


def timestamp_code(moment: datetime) -> str:
    """Twelve digits, year to minute, used in order references and receipts."""
    return moment.astimezone(UTC).strftime("%Y%m%d%H%M")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes; captured at placement and never changed afterwards."""

    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    province: String(required=True, max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100, default="Pakistan")
    phone: String(max_length=20)


@marketplace.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked at placement; later price changes never touch them."""

    subtotal: Float(default=0.0)
    offer_savings: Float(default=0.0)
    discount: Float(default=0.0)
    tax: Float(default=0.0)
    shipping: Float(default=0.0)
    total: Float(default=0.0)
    currency: String(max_length=3, default="PKR")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    product_id: Identifier(required=True)
    store_id: Identifier(required=True)
    variant_sku: String(max_length=100)
    variant_attributes: Text()  # JSON object
    title: String(required=True, max_length=255)
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(required=True, min_value=0.0)
    base_price: Float(min_value=0.0)
    offer_id: Identifier()


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@marketplace.aggregate(event_sourced=True)
class Order:
    reference: String(max_length=20)
    buyer_id: Identifier(required=True)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items: HasMany(OrderItem)
    shipping_address: ValueObject(ShippingAddress)
    pricing: ValueObject(OrderPricing)
    tax_details: Text()  # JSON array
    discount_details: Text()  # JSON array
    shipping_method: String(max_length=50)
    carrier: String(max_length=100)
    payment_method: String(max_length=20, default=PAYMENT_COD)
    cod_payment_status: String(choices=CodPaymentStatus, default=CodPaymentStatus.PENDING.value)
    cod_receipt_id: String(max_length=50)
    cod_collected_at: DateTime()
    tracking_number: String(max_length=100)
    courier_service: String(max_length=100)
    processing_estimate: String(max_length=100)
    estimated_delivery: String(max_length=100)
    cancellation_reason: String(max_length=500)
    cancelled_by: String(max_length=20)
    cancelled_at: DateTime()
    reactivated_at: DateTime()
    placed_at: DateTime()
    updated_at: DateTime()

    @property
    def is_cod(self) -> bool:
        return (self.payment_method or "").lower() in (PAYMENT_COD, "cash")

    @property
    def store_ids(self) -> set[str]:
        return {str(item.store_id) for item in self.items or []}

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        buyer_id,
        items_data,
        shipping_address,
        pricing,
        tax_details=None,
        discount_details=None,
        shipping_method="standard",
        carrier=None,
        payment_method=PAYMENT_COD,
    ):
        """Place a new order from a priced checkout.

        Args:
            buyer_id: The buyer placing the order.
            items_data: List of dicts with product_id, store_id, variant_sku,
                        variant_attributes, title, quantity, unit_price,
                        base_price and offer_id.
            shipping_address: Dict with street, city, province, postal_code,
                              country and phone.
            pricing: Dict with subtotal, offer_savings, discount, tax,
                     shipping, total and currency.
        """
        now = datetime.now(UTC)

        # Pre-generate item IDs for deterministic replay
        items_with_ids = [{**item, "id": str(uuid4())} for item in items_data]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                reference=f"PH-{timestamp_code(now)}",
                buyer_id=str(buyer_id),
                items=json.dumps(items_with_ids),
                shipping_address=json.dumps(shipping_address),
                subtotal=pricing.get("subtotal", 0.0),
                offer_savings=pricing.get("offer_savings", 0.0),
                discount=pricing.get("discount", 0.0),
                tax=pricing.get("tax", 0.0),
                shipping=pricing.get("shipping", 0.0),
                total=pricing.get("total", 0.0),
                currency=pricing.get("currency", "PKR"),
                tax_details=json.dumps(tax_details or []),
                discount_details=json.dumps(discount_details or []),
                shipping_method=shipping_method,
                carrier=carrier,
                payment_method=payment_method,
                estimated_delivery=COD_ESTIMATED_DELIVERY,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"status": [f"Invalid state change from {current.value} to {target_status.value}"]}
            )

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def advance(self, status, tracking_number=None, courier_service=None, processing_estimate=None):
        try:
            target = OrderStatus(str(status).lower())
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]})

        if target == OrderStatus.PROCESSING:
            self.mark_processing(processing_estimate)
        elif target == OrderStatus.SHIPPED:
            self.ship(tracking_number, courier_service)
        elif target == OrderStatus.DELIVERED:
            self.deliver(tracking_number, courier_service)
        else:
            self._assert_can_transition(target)

    def mark_processing(self, processing_estimate=None):
        self._assert_can_transition(OrderStatus.PROCESSING)
        self.raise_(
            OrderProcessing(
                order_id=str(self.id),
                processing_estimate=processing_estimate,
                started_at=datetime.now(UTC),
            )
        )

    def ship(self, tracking_number=None, courier_service=None):
        self._assert_can_transition(OrderStatus.SHIPPED)

        tracking_number = tracking_number or self.tracking_number
        courier_service = courier_service or self.courier_service
        if not tracking_number:
            raise ValidationError({"tracking_number": ["Tracking number is required to mark as shipped"]})
        if not courier_service:
            raise ValidationError({"courier_service": ["Courier service is required to mark as shipped"]})

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_number=tracking_number,
                courier_service=courier_service,
                shipped_at=datetime.now(UTC),
            )
        )

    def deliver(self, tracking_number=None, courier_service=None):
        self._assert_can_transition(OrderStatus.DELIVERED)

        if not (tracking_number or self.tracking_number) or not (courier_service or self.courier_service):
            raise ValidationError({"tracking_number": ["Shipment tracking must be verified before delivery"]})
        if self.is_cod and self.cod_payment_status != CodPaymentStatus.COLLECTED.value:
            raise ValidationError({"cod_payment_status": ["Payment not verified. Delivery disabled."]})

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=datetime.now(UTC)))

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def collect_cod_payment(self):
        if not self.is_cod:
            raise ValidationError({"payment_method": ["Not a COD order"]})

        now = datetime.now(UTC)
        self.raise_(
            CodPaymentCollected(
                order_id=str(self.id),
                receipt_id=f"RCPT-{timestamp_code(now)}",
                collected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation & Reactivation
    # -------------------------------------------------------------------
    def cancel(self, reason, cancelled_by, now=None):
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["Cancellation reason is required"]})

        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATES:
            raise ValidationError({"status": [f"Cannot cancel an order that is {current.value}"]})

        now = as_utc(now) or datetime.now(UTC)
        if now - as_utc(self.placed_at) >= CANCELLATION_WINDOW:
            raise ValidationError({"status": ["Cancellation window has expired (7 days limit)"]})

        try:
            actor = CancellationActor(cancelled_by)
        except ValueError:
            raise ValidationError({"cancelled_by": [f"Unknown cancelling party: {cancelled_by}"]})

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason.strip(),
                cancelled_by=actor.value,
                # Cancelled COD orders are closed off with a placeholder receipt
                cod_receipt_id=CANCELLED_RECEIPT if self.is_cod else None,
                cancelled_at=now,
            )
        )

    def reactivate(self, reactivated_by=None, now=None):
        if OrderStatus(self.status) != OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Only cancelled orders can be re-activated"]})

        now = as_utc(now) or datetime.now(UTC)
        if self.cancelled_at and now - as_utc(self.cancelled_at) > REACTIVATION_WINDOW:
            raise ValidationError({"status": ["Reactivation window expired"]})

        self.raise_(
            OrderReactivated(
                order_id=str(self.id),
                reactivated_by=reactivated_by,
                reactivated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.reference = event.reference
        self.buyer_id = event.buyer_id
        self.status = OrderStatus.PENDING.value
        self.payment_method = event.payment_method
        self.cod_payment_status = CodPaymentStatus.PENDING.value
        self.shipping_method = event.shipping_method
        self.carrier = event.carrier
        self.estimated_delivery = event.estimated_delivery
        self.tax_details = event.tax_details
        self.discount_details = event.discount_details
        self.placed_at = event.placed_at
        self.updated_at = event.placed_at

        # Reconstruct items from JSON (includes IDs for deterministic replay)
        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderItem(**item_data) for item_data in items_data]

        address = json.loads(event.shipping_address) if isinstance(event.shipping_address, str) else {}
        if address:
            self.shipping_address = ShippingAddress(**address)

        self.pricing = OrderPricing(
            subtotal=event.subtotal,
            offer_savings=event.offer_savings or 0.0,
            discount=event.discount or 0.0,
            tax=event.tax or 0.0,
            shipping=event.shipping or 0.0,
            total=event.total,
            currency=event.currency or "PKR",
        )

    @apply
    def _on_order_processing(self, event: OrderProcessing):
        self.status = OrderStatus.PROCESSING.value
        if event.processing_estimate:
            self.processing_estimate = event.processing_estimate
            self.estimated_delivery = event.processing_estimate
        self.updated_at = event.started_at

    @apply
    def _on_order_shipped(self, event: OrderShipped):
        self.status = OrderStatus.SHIPPED.value
        self.tracking_number = event.tracking_number
        self.courier_service = event.courier_service
        self.updated_at = event.shipped_at

    @apply
    def _on_order_delivered(self, event: OrderDelivered):
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = event.delivered_at

    @apply
    def _on_cod_payment_collected(self, event: CodPaymentCollected):
        self.cod_payment_status = CodPaymentStatus.COLLECTED.value
        self.cod_receipt_id = event.receipt_id
        self.cod_collected_at = event.collected_at
        self.updated_at = event.collected_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.cancelled_by = event.cancelled_by
        self.cancelled_at = event.cancelled_at
        if event.cod_receipt_id:
            self.cod_payment_status = CodPaymentStatus.COLLECTED.value
            self.cod_receipt_id = self.cod_receipt_id or event.cod_receipt_id
            self.cod_collected_at = event.cancelled_at
        self.updated_at = event.cancelled_at

    @apply
    def _on_order_reactivated(self, event: OrderReactivated):
        self.status = OrderStatus.PENDING.value
        if self.cod_receipt_id == CANCELLED_RECEIPT:
            self.cod_payment_status = CodPaymentStatus.PENDING.value
            self.cod_receipt_id = None
            self.cod_collected_at = None
        self.reactivated_at = event.reactivated_at
        self.updated_at = event.reactivated_at
