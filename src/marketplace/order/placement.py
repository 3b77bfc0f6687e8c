"""Order placement — the cash-on-delivery checkout.

Placement re-prices every line on the server, checks stock and COD
eligibility, records the order and takes the ordered units off the shelf.
"""

import json
from datetime import timedelta

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Dict, Identifier, List, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.management import load_cart
from marketplace.catalogue.product import Product
from marketplace.checkout.calculator import CheckoutCalculator, CheckoutLine
from marketplace.domain import logger, marketplace
from marketplace.order.order import PAYMENT_COD, Order, OrderStatus
from marketplace.pricing.clock import utc_now
from marketplace.pricing.money import to_decimal
from marketplace.pricing.province import compose_address
from marketplace.settings.platform import load_platform_settings
from marketplace.store.store import Store

MIN_ADDRESS_LENGTH = 10
MIN_PHONE_LENGTH = 7
RISK_WINDOW = timedelta(days=30)
RISK_CANCELLATION_THRESHOLD = 2


@marketplace.command(part_of="Order")
class PlaceOrder:
    buyer_id: Identifier(required=True)
    items: List(Dict())  # [{"product_id", "variant_sku", "quantity"}]
    from_cart: Boolean(default=False)
    street: String(max_length=255)
    city: String(max_length=100)
    province: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100, default="Pakistan")
    phone: String(max_length=20)
    payment_method: String(max_length=20, default=PAYMENT_COD)
    shipping_method: String(max_length=50)


def _checkout_lines(command) -> list[CheckoutLine]:
    items = command.items or []
    if not items and command.from_cart:
        cart = load_cart(command.buyer_id)
        items = [
            {"product_id": i.product_id, "variant_sku": i.variant_sku, "quantity": i.quantity} for i in cart.items
        ]
    if not items:
        raise ValidationError({"items": ["Items required"]})

    lines = []
    for item in items:
        try:
            quantity = int(item.get("quantity") or 0)
        except (TypeError, ValueError):
            raise ValidationError({"quantity": ["Quantity must be a whole number"]})
        lines.append(
            CheckoutLine(
                product_id=str(item.get("product_id")),
                quantity=quantity,
                variant_sku=item.get("variant_sku") or None,
            )
        )
    return lines


def _validate_address(command) -> dict:
    missing = [name for name in ("street", "city", "province") if not (getattr(command, name) or "").strip()]
    if missing:
        raise ValidationError({name: ["Shipping address is incomplete"] for name in missing})

    address = compose_address(command.street, command.city, command.province, command.postal_code, command.country)
    if len(address) < MIN_ADDRESS_LENGTH:
        raise ValidationError({"street": ["Shipping address is too short"]})

    phone = (command.phone or "").strip()
    if len(phone) < MIN_PHONE_LENGTH:
        raise ValidationError({"phone": ["A valid phone number is required"]})

    return {
        "street": command.street.strip(),
        "city": command.city.strip(),
        "province": command.province.strip(),
        "postal_code": command.postal_code,
        "country": command.country or "Pakistan",
        "phone": phone,
    }


def _reserve_products(lines) -> dict[str, Product]:
    """Load and check every product; lines for the same product share one instance."""
    repo = current_domain.repository_for(Product)
    products: dict[str, Product] = {}
    requested: dict[tuple[str, str | None], int] = {}

    for line in lines:
        product = products.get(line.product_id) or repo.get(line.product_id)
        products[line.product_id] = product

        if not product.is_orderable:
            raise ValidationError({"product_id": ["Product not available"]})

        if line.variant_sku and product.find_variant(line.variant_sku) is None:
            raise ValidationError({"variant_sku": ["Invalid product variant"]})

        if line.quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})

        key = (line.product_id, line.variant_sku)
        requested[key] = requested.get(key, 0) + line.quantity
        if requested[key] > product.available_stock(line.variant_sku):
            message = (
                "Insufficient stock for selected variant" if line.variant_sku else "Insufficient stock for product"
            )
            raise ValidationError({"quantity": [message]})

    return products


def _ensure_cod_ready(products) -> None:
    store_repo = current_domain.repository_for(Store)
    for store_id in {str(p.store_id) for p in products.values()}:
        if not store_repo.get(store_id).is_cod_ready:
            raise ValidationError({"payment_method": ["COD not available for selected items"]})


def recent_cancellations(buyer_id, now=None) -> int:
    """Cancelled orders the buyer placed within the risk window."""
    from marketplace.projections.buyer_orders import BuyerOrders

    since = (now or utc_now()) - RISK_WINDOW
    return (
        current_domain.repository_for(BuyerOrders)
        ._dao.query.filter(buyer_id=str(buyer_id), status=OrderStatus.CANCELLED.value, placed_at__gte=since)
        .all()
        .total
    )


def _item_payload(line, product) -> dict:
    variant = product.find_variant(line.variant_sku)
    return {
        "product_id": line.product_id,
        "store_id": line.store_id,
        "variant_sku": line.variant_sku,
        "variant_attributes": json.dumps(variant.attributes or {}) if variant is not None else None,
        "title": product.title,
        "quantity": line.quantity,
        "unit_price": float(line.unit_price),
        "base_price": float(line.base_price),
        "offer_id": line.offer_id,
    }


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if (command.payment_method or PAYMENT_COD).lower() != PAYMENT_COD:
            raise ValidationError({"payment_method": ["Only cash on delivery is supported"]})

        lines = _checkout_lines(command)
        address = _validate_address(command)
        products = _reserve_products(lines)
        _ensure_cod_ready(products)

        quote = CheckoutCalculator().quote(
            lines,
            address=compose_address(*(address[k] for k in ("street", "city", "province", "postal_code", "country"))),
            province=address["province"],
            method=command.shipping_method,
            buyer_id=str(command.buyer_id),
            products=products,
        )

        settings = load_platform_settings()
        cod_limit = to_decimal(settings.cod_limit)
        if quote.subtotal > cod_limit:
            logger.info(
                "cod_rejected",
                buyer_id=str(command.buyer_id),
                reason="limit",
                subtotal=str(quote.subtotal),
                cod_limit=str(cod_limit),
            )
            raise ValidationError({"payment_method": ["COD not available for high-value orders"]})

        if settings.strict_cod_risk_check:
            cancellations = recent_cancellations(command.buyer_id)
            if cancellations >= RISK_CANCELLATION_THRESHOLD:
                logger.info(
                    "cod_rejected",
                    buyer_id=str(command.buyer_id),
                    reason="risk",
                    cancellations=cancellations,
                )
                raise ValidationError(
                    {"payment_method": [f"COD not available due to risk ({cancellations} cancellations in 30 days)"]}
                )

        summary = quote.as_dict()
        order = Order.place(
            buyer_id=command.buyer_id,
            items_data=[_item_payload(line, products[line.product_id]) for line in quote.lines],
            shipping_address=address,
            pricing={
                "subtotal": float(quote.subtotal),
                "offer_savings": float(quote.offer_savings),
                "discount": float(quote.discount),
                "tax": float(quote.tax),
                "shipping": float(quote.shipping),
                "total": float(quote.total),
            },
            tax_details=summary["tax_details"],
            discount_details=summary["discount_details"],
            shipping_method=quote.method,
            carrier=quote.carrier,
        )
        current_domain.repository_for(Order).add(order)

        product_repo = current_domain.repository_for(Product)
        for line in lines:
            products[line.product_id].withdraw_stock(line.quantity, line.variant_sku)
        for product in products.values():
            product_repo.add(product)

        if command.from_cart:
            cart = load_cart(command.buyer_id)
            cart.clear()
            current_domain.repository_for(Cart).add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            reference=order.reference,
            buyer_id=str(command.buyer_id),
            total=str(quote.total),
            lines=len(lines),
        )
        return str(order.id)
