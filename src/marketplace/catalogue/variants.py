"""Variant and stock management — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Dict, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import logger, marketplace
from marketplace.projections.sku_index import SkuIndex


def ensure_sku_is_free(sku):
    """SKUs identify a variant across the whole catalogue, not just one product."""
    if not sku:
        raise ValidationError({"sku": ["SKU is required"]})
    try:
        entry = current_domain.repository_for(SkuIndex).get(sku)
    except ObjectNotFoundError:
        return
    raise ValidationError({"sku": [f"SKU {sku} is already used by product {entry.product_id}"]})


@marketplace.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    variant_sku: String(max_length=100)


@marketplace.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    sku: String(required=True, max_length=100)
    attributes: Dict()
    price: Float()
    stock: Integer()


@marketplace.command(part_of="Product")
class UpdateVariant:
    product_id: Identifier(required=True)
    sku: String(required=True, max_length=100)
    attributes: Dict()
    price: Float()
    stock: Integer()


@marketplace.command(part_of="Product")
class RemoveVariant:
    product_id: Identifier(required=True)
    sku: String(required=True, max_length=100)


@marketplace.command_handler(part_of=Product)
class ManageVariantsHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_stock(command.quantity, variant_sku=command.variant_sku)
        repo.add(product)
        logger.info(
            "stock_adjusted",
            product_id=str(product.id),
            variant_sku=command.variant_sku,
            quantity=command.quantity,
        )

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        sku = command.sku.strip()
        if product.find_variant(sku) is None:
            ensure_sku_is_free(sku)
        product.add_variant(sku=sku, attributes=command.attributes, price=command.price, stock=command.stock)
        repo.add(product)

    @handle(UpdateVariant)
    def update_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_variant(
            command.sku,
            attributes=command.attributes or None,
            price=command.price,
            stock=command.stock,
        )
        repo.add(product)

    @handle(RemoveVariant)
    def remove_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.remove_variant(command.sku)
        repo.add(product)
