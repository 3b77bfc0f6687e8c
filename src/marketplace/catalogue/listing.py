"""Product listing and moderation — commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Dict, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, ProductStatus
from marketplace.catalogue.variants import ensure_sku_is_free
from marketplace.domain import logger, marketplace
from marketplace.store.store import Store


@marketplace.command(part_of="Product")
class ListProduct:
    store_id: Identifier(required=True)
    title: String(required=True, max_length=255)
    price: Float(required=True)
    stock: Integer(default=0)
    district: String(required=True, max_length=100)
    gi_brand: String(required=True, max_length=100)
    description: Text()
    images: List(String(max_length=500))
    category_id: Identifier()
    tax_exempt: Boolean(default=False)
    weight_kg: Float()
    length_cm: Float()
    width_cm: Float()
    height_cm: Float()
    variants: List(Dict())


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    title: String(max_length=255)
    description: Text()
    price: Float()
    images: List(String(max_length=500))
    district: String(max_length=100)
    gi_brand: String(max_length=100)
    category_id: Identifier()
    tax_exempt: Boolean()
    weight_kg: Float()
    length_cm: Float()
    width_cm: Float()
    height_cm: Float()


@marketplace.command(part_of="Product")
class ChangeProductStatus:
    product_id: Identifier(required=True)
    status: String(required=True, choices=ProductStatus)


@marketplace.command(part_of="Product")
class ToggleProductActive:
    product_id: Identifier(required=True)


@marketplace.command(part_of="Product")
class DelistProduct:
    product_id: Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ProductListingHandler:
    @handle(ListProduct)
    def list_product(self, command):
        # Raises ObjectNotFoundError for an unknown store
        current_domain.repository_for(Store).get(command.store_id)

        variants = command.variants or []
        stock = command.stock or 0
        if variants and all(v.get("stock") is not None for v in variants):
            # A product sold only through variants holds their combined stock
            stock = sum(int(v["stock"]) for v in variants)
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        product = Product.create(
            store_id=command.store_id,
            title=command.title,
            price=command.price,
            stock=stock,
            district=command.district,
            gi_brand=command.gi_brand,
            description=command.description,
            images=command.images,
            category_id=command.category_id,
            tax_exempt=command.tax_exempt,
            weight_kg=command.weight_kg,
            length_cm=command.length_cm,
            width_cm=command.width_cm,
            height_cm=command.height_cm,
        )
        for spec in variants:
            sku = str(spec.get("sku") or "").strip()
            ensure_sku_is_free(sku)
            product.add_variant(
                sku=sku,
                attributes=spec.get("attributes"),
                price=spec.get("price"),
                stock=spec.get("stock"),
            )

        current_domain.repository_for(Product).add(product)
        logger.info("product_listed", product_id=str(product.id), store_id=str(command.store_id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            title=command.title,
            description=command.description,
            price=command.price,
            images=command.images or None,
            district=command.district,
            gi_brand=command.gi_brand,
            category_id=command.category_id,
            tax_exempt=command.tax_exempt,
            weight_kg=command.weight_kg,
            length_cm=command.length_cm,
            width_cm=command.width_cm,
            height_cm=command.height_cm,
        )
        repo.add(product)

    @handle(ChangeProductStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_status(command.status)
        repo.add(product)
        logger.info("product_status_changed", product_id=str(product.id), status=product.status)

    @handle(ToggleProductActive)
    def toggle_active(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.toggle_active()
        repo.add(product)
        return product.is_active

    @handle(DelistProduct)
    def delist(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.delist()
        repo.add(product)
        logger.info("product_delisted", product_id=str(product.id))
