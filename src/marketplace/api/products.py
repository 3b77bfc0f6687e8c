"""Product and category endpoints."""

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.api.access import Actor, current_actor, require_admin, require_store_owner
from marketplace.api.schemas import (
    CreateProductRequest,
    DistrictCategoryRequest,
    DistrictCategoryResponse,
    IdResponse,
    ProductCardResponse,
    ProductCategoryRequest,
    ProductCategoryResponse,
    ProductPageResponse,
    ProductResponse,
    ProductStatusRequest,
    StatusResponse,
    StockRequest,
    SuggestionListResponse,
    SuggestionResponse,
    ToggleActiveResponse,
    UpdateProductCategoryRequest,
    UpdateProductRequest,
    VariantPayload,
    VariantResponse,
)
from marketplace.catalogue.browse import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_SUGGESTIONS,
    browse_products,
    suggest_products,
)
from marketplace.catalogue.categories import (
    CreateDistrictCategory,
    CreateProductCategory,
    DeleteProductCategory,
    UpdateProductCategory,
)
from marketplace.catalogue.category import DistrictCategory, ProductCategory
from marketplace.catalogue.listing import (
    ChangeProductStatus,
    DelistProduct,
    ListProduct,
    ToggleProductActive,
    UpdateProduct,
)
from marketplace.catalogue.product import Product
from marketplace.catalogue.variants import AddVariant, AdjustStock
from marketplace.projections.product_rating import ProductRating

product_router = APIRouter(tags=["products"])
category_router = APIRouter(tags=["categories"])


def _rating(product_id):
    try:
        rating = current_domain.repository_for(ProductRating).get(product_id)
    except ObjectNotFoundError:
        return 0, 0.0
    return rating.review_count or 0, rating.average_rating or 0.0


def product_response(product) -> ProductResponse:
    review_count, average_rating = _rating(product.id)
    return ProductResponse(
        product_id=str(product.id),
        store_id=str(product.store_id),
        title=product.title,
        description=product.description,
        price=product.price,
        stock=product.stock or 0,
        images=list(product.images or []),
        district=product.district,
        gi_brand=product.gi_brand,
        category_id=product.category_id,
        status=product.status,
        is_active=bool(product.is_active),
        tax_exempt=bool(product.tax_exempt),
        weight_kg=product.weight_kg,
        length_cm=product.length_cm,
        width_cm=product.width_cm,
        height_cm=product.height_cm,
        variants=[
            VariantResponse(sku=v.sku, attributes=dict(v.attributes or {}), price=v.price, stock=v.stock)
            for v in product.variants or []
        ],
        review_count=review_count,
        average_rating=average_rating,
    )


def _store_of(product_id):
    return current_domain.repository_for(Product).get(product_id).store_id


# --- Product endpoints ---


@product_router.post("/products", status_code=201, response_model=IdResponse)
async def list_product(body: CreateProductRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_store_owner(actor, body.store_id)
    command = ListProduct(
        store_id=body.store_id,
        title=body.title,
        price=body.price,
        stock=body.stock,
        district=body.district,
        gi_brand=body.gi_brand,
        description=body.description,
        images=body.images,
        category_id=body.category_id,
        tax_exempt=body.tax_exempt,
        weight_kg=body.weight_kg,
        length_cm=body.length_cm,
        width_cm=body.width_cm,
        height_cm=body.height_cm,
        variants=[v.model_dump() for v in body.variants],
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@product_router.get("/search/suggestions", response_model=SuggestionListResponse)
async def search_suggestions(q: str = "", limit: int = Query(MAX_SUGGESTIONS, ge=1)) -> SuggestionListResponse:
    return SuggestionListResponse(
        suggestions=[
            SuggestionResponse(
                product_id=str(card.product_id),
                title=card.title,
                gi_brand=card.gi_brand,
                category_id=str(card.category_id) if card.category_id else None,
                district=card.district,
                image_url=card.image_url,
            )
            for card in suggest_products(q, limit)
        ]
    )


@product_router.get("/products", response_model=ProductPageResponse)
async def browse(
    district: str | None = None,
    gi_brand: str | None = None,
    category: str | None = None,
    store_id: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    search: str | None = None,
    status: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> ProductPageResponse:
    # Only admins can see unapproved or inactive products here
    result = browse_products(
        district=district,
        gi_brand=gi_brand,
        category_id=category,
        store_id=store_id,
        min_price=min_price,
        max_price=max_price,
        search=search,
        status=status if actor.is_admin else None,
        include_inactive=actor.is_admin,
        page=page,
        page_size=page_size,
    )
    return ProductPageResponse(
        products=[
            ProductCardResponse(
                product_id=str(card.product_id),
                store_id=str(card.store_id),
                title=card.title,
                price=card.price,
                stock=card.stock or 0,
                district=card.district,
                gi_brand=card.gi_brand,
                category_id=card.category_id,
                image_url=card.image_url,
                status=card.status,
                is_active=bool(card.is_active),
                rating=card.effective_rating or 0.0,
                review_count=card.review_count or 0,
            )
            for card in result.cards
        ],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


@product_router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return product_response(current_domain.repository_for(Product).get(product_id))


@product_router.put("/products/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str, body: UpdateProductRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_store_owner(actor, _store_of(product_id))
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/products/{product_id}/stock", response_model=StatusResponse)
async def adjust_stock(product_id: str, body: StockRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_store_owner(actor, _store_of(product_id))
    current_domain.process(
        AdjustStock(product_id=product_id, quantity=body.quantity, variant_sku=body.variant_sku),
        asynchronous=False,
    )
    return StatusResponse()


@product_router.post("/products/{product_id}/variants", status_code=201, response_model=StatusResponse)
async def add_variant(product_id: str, body: VariantPayload, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_store_owner(actor, _store_of(product_id))
    command = AddVariant(
        product_id=product_id,
        sku=body.sku,
        attributes=body.attributes,
        price=body.price,
        stock=body.stock,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.patch("/vendor/products/{product_id}/toggle-active", response_model=ToggleActiveResponse)
async def toggle_active(product_id: str, actor: Actor = Depends(current_actor)) -> ToggleActiveResponse:
    require_store_owner(actor, _store_of(product_id))
    is_active = current_domain.process(ToggleProductActive(product_id=product_id), asynchronous=False)
    return ToggleActiveResponse(product_id=product_id, is_active=is_active)


@product_router.put("/admin/products/{product_id}/status", response_model=StatusResponse)
async def change_product_status(
    product_id: str, body: ProductStatusRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    current_domain.process(ChangeProductStatus(product_id=product_id, status=body.status), asynchronous=False)
    return StatusResponse()


@product_router.delete("/products/{product_id}", response_model=StatusResponse)
async def delist_product(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_store_owner(actor, _store_of(product_id))
    current_domain.process(DelistProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# --- Category endpoints ---


def _product_category_response(category) -> ProductCategoryResponse:
    return ProductCategoryResponse(
        category_id=str(category.id),
        name=category.name,
        slug=category.slug,
        description=category.description,
    )


@category_router.get("/product-categories", response_model=list[ProductCategoryResponse])
async def list_product_categories() -> list[ProductCategoryResponse]:
    categories = current_domain.repository_for(ProductCategory)._dao.query.order_by("name").limit(None).all().items
    return [_product_category_response(c) for c in categories]


@category_router.post("/product-categories", status_code=201, response_model=IdResponse)
async def create_product_category(
    body: ProductCategoryRequest, actor: Actor = Depends(current_actor)
) -> IdResponse:
    require_admin(actor)
    command = CreateProductCategory(name=body.name, slug=body.slug, description=body.description)
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@category_router.put("/admin/product-categories/{category_id}", response_model=StatusResponse)
async def update_product_category(
    category_id: str, body: UpdateProductCategoryRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    command = UpdateProductCategory(
        category_id=category_id,
        name=body.name,
        slug=body.slug,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.delete("/admin/product-categories/{category_id}", response_model=StatusResponse)
async def delete_product_category(category_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(DeleteProductCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


@category_router.get("/categories", response_model=list[DistrictCategoryResponse])
async def list_district_categories() -> list[DistrictCategoryResponse]:
    categories = current_domain.repository_for(DistrictCategory)._dao.query.order_by("district").limit(None).all().items
    return [
        DistrictCategoryResponse(
            category_id=str(c.id),
            district=c.district,
            gi_brand=c.gi_brand,
            crafts=list(c.crafts or []),
        )
        for c in categories
    ]


@category_router.post("/categories", status_code=201, response_model=IdResponse)
async def create_district_category(
    body: DistrictCategoryRequest, actor: Actor = Depends(current_actor)
) -> IdResponse:
    require_admin(actor)
    command = CreateDistrictCategory(district=body.district, gi_brand=body.gi_brand, crafts=body.crafts)
    return IdResponse(id=current_domain.process(command, asynchronous=False))
