"""Category management — commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, List, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.category import DistrictCategory, ProductCategory, slugify
from marketplace.domain import logger, marketplace


@marketplace.command(part_of="ProductCategory")
class CreateProductCategory:
    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    description: Text()


@marketplace.command(part_of="ProductCategory")
class UpdateProductCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    slug: String(max_length=120)
    description: Text()


@marketplace.command(part_of="ProductCategory")
class DeleteProductCategory:
    category_id: Identifier(required=True)


@marketplace.command(part_of="DistrictCategory")
class CreateDistrictCategory:
    district: String(required=True, max_length=100)
    gi_brand: String(required=True, max_length=100)
    crafts: List(String(max_length=100))


def _ensure_slug_is_free(slug, category_id=None):
    query = current_domain.repository_for(ProductCategory)._dao.query.filter(slug=slug)
    if category_id:
        query = query.exclude(id=category_id)
    if query.all().total:
        raise ValidationError({"slug": [f"Slug '{slug}' is already in use"]})


@marketplace.command_handler(part_of=ProductCategory)
class ProductCategoryHandler:
    @handle(CreateProductCategory)
    def create_category(self, command):
        slug = (command.slug or slugify(command.name)).strip()
        _ensure_slug_is_free(slug)

        category = ProductCategory(name=command.name.strip(), slug=slug, description=command.description)
        current_domain.repository_for(ProductCategory).add(category)
        logger.info("product_category_created", category_id=str(category.id), slug=slug)
        return str(category.id)

    @handle(UpdateProductCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(ProductCategory)
        category = repo.get(command.category_id)

        if command.slug and command.slug != category.slug:
            _ensure_slug_is_free(command.slug, category_id=command.category_id)
            category.slug = command.slug
        if command.name:
            category.name = command.name
        if command.description is not None:
            category.description = command.description
        repo.add(category)

    @handle(DeleteProductCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(ProductCategory)
        category = repo.get(command.category_id)
        repo._dao.delete(category)
        logger.info("product_category_deleted", category_id=str(command.category_id))


@marketplace.command_handler(part_of=DistrictCategory)
class DistrictCategoryHandler:
    @handle(CreateDistrictCategory)
    def create_district_category(self, command):
        district = command.district.strip()
        existing = current_domain.repository_for(DistrictCategory)._dao.query.filter(district=district).all()
        if existing.total:
            raise ValidationError({"district": [f"District '{district}' already has a category"]})

        category = DistrictCategory(
            district=district,
            gi_brand=command.gi_brand.strip(),
            crafts=[c.strip() for c in command.crafts or [] if c and c.strip()],
        )
        current_domain.repository_for(DistrictCategory).add(category)
        return str(category.id)
