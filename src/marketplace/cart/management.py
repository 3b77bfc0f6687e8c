"""Cart management — commands, handler and the cart summary."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.product import Product
from marketplace.checkout.calculator import CheckoutCalculator, CheckoutLine
from marketplace.domain import marketplace
from marketplace.pricing.money import ZERO, round_money


def load_cart(buyer_id) -> Cart:
    try:
        return current_domain.repository_for(Cart).get(buyer_id)
    except ObjectNotFoundError:
        return Cart(buyer_id=buyer_id)


def _orderable_product(product_id, variant_sku=None) -> Product:
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_orderable:
        raise ValidationError({"product_id": ["Product not available"]})
    if variant_sku and product.find_variant(variant_sku) is None:
        raise ValidationError({"variant_sku": ["Invalid product variant"]})
    return product


@marketplace.command(part_of="Cart")
class AddToCart:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_sku: String(max_length=100)
    quantity: Integer(default=1)


@marketplace.command(part_of="Cart")
class UpdateCartItem:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_sku: String(max_length=100)
    quantity: Integer(required=True)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_sku: String(max_length=100)


@marketplace.command(part_of="Cart")
class ClearCart:
    buyer_id: Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class CartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _orderable_product(command.product_id, command.variant_sku)
        cart = load_cart(command.buyer_id)
        quantity = cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            available=product.available_stock(command.variant_sku),
            variant_sku=command.variant_sku,
            store_id=product.store_id,
        )
        current_domain.repository_for(Cart).add(cart)
        return quantity

    @handle(UpdateCartItem)
    def update_item(self, command):
        cart = load_cart(command.buyer_id)
        available = 0
        if command.quantity and command.quantity > 0:
            product = current_domain.repository_for(Product).get(command.product_id)
            available = product.available_stock(command.variant_sku)
        quantity = cart.update_item(command.product_id, command.quantity, available, variant_sku=command.variant_sku)
        current_domain.repository_for(Cart).add(cart)
        return quantity

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = load_cart(command.buyer_id)
        cart.remove_item(command.product_id, variant_sku=command.variant_sku)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.buyer_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)


def summarize_cart(buyer_id) -> dict:
    """Cart lines priced at today's offer prices, with item count and total."""
    cart = load_cart(buyer_id)
    lines = [CheckoutLine(product_id=i.product_id, quantity=i.quantity, variant_sku=i.variant_sku) for i in cart.items]
    priced = CheckoutCalculator().price_lines(lines) if lines else []
    total = sum((line.line_total for line in priced), ZERO)
    return {
        "buyer_id": str(buyer_id),
        "items": priced,
        "count": cart.count,
        "total": round_money(total),
    }
