"""Pydantic request/response schemas for the Marketplace API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


# --- Stores ---


class OpenStoreRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Multan Blue Pottery House",
                    "district": "Multan",
                    "gi_brands": ["Multani Blue Pottery"],
                    "description": "Hand-painted kashi tiles and vases.",
                }
            ]
        }
    }

    name: str = Field(..., max_length=150)
    district: str = Field(..., max_length=100)
    gi_brands: list[str] = Field(default_factory=list)
    description: str | None = None
    logo_url: str | None = Field(None, max_length=500)
    vendor_id: str | None = None


class UpdateStoreRequest(BaseModel):
    name: str | None = Field(None, max_length=150)
    description: str | None = None
    logo_url: str | None = Field(None, max_length=500)
    district: str | None = Field(None, max_length=100)
    gi_brands: list[str] | None = None


class StoreStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(pending|approved|rejected|suspended)$")
    reason: str | None = Field(None, max_length=500)


class StoreCodRequest(BaseModel):
    enabled: bool


class StoreResponse(BaseModel):
    store_id: str
    vendor_id: str
    name: str
    description: str | None = None
    logo_url: str | None = None
    district: str
    gi_brands: list[str] = []
    status: str
    deactivation_reason: str | None = None
    cod_enabled: bool
    cod_ready: bool


# --- Products ---


class VariantPayload(BaseModel):
    sku: str = Field(..., max_length=100)
    attributes: dict[str, Any] = Field(default_factory=dict)
    price: float | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "store-001",
                    "title": "Blue Pottery Vase",
                    "price": 2500.0,
                    "stock": 12,
                    "district": "Multan",
                    "gi_brand": "Multani Blue Pottery",
                    "images": ["https://cdn.example.pk/vase.jpg"],
                    "weight_kg": 1.2,
                }
            ]
        }
    }

    store_id: str
    title: str = Field(..., max_length=255)
    price: float
    stock: int = Field(0, ge=0)
    district: str = Field(..., max_length=100)
    gi_brand: str = Field(..., max_length=100)
    description: str | None = None
    images: list[str] = Field(default_factory=list)
    category_id: str | None = None
    tax_exempt: bool = False
    weight_kg: float | None = Field(None, ge=0)
    length_cm: float | None = Field(None, ge=0)
    width_cm: float | None = Field(None, ge=0)
    height_cm: float | None = Field(None, ge=0)
    variants: list[VariantPayload] = Field(default_factory=list)


class UpdateProductRequest(BaseModel):
    title: str | None = Field(None, max_length=255)
    description: str | None = None
    price: float | None = None
    images: list[str] | None = None
    district: str | None = Field(None, max_length=100)
    gi_brand: str | None = Field(None, max_length=100)
    category_id: str | None = None
    tax_exempt: bool | None = None
    weight_kg: float | None = Field(None, ge=0)
    length_cm: float | None = Field(None, ge=0)
    width_cm: float | None = Field(None, ge=0)
    height_cm: float | None = Field(None, ge=0)


class StockRequest(BaseModel):
    quantity: int = Field(..., ge=0)
    variant_sku: str | None = None


class ProductStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(pending|approved|rejected)$")


class VariantResponse(BaseModel):
    sku: str
    attributes: dict[str, Any] = {}
    price: float | None = None
    stock: int | None = None


class ProductResponse(BaseModel):
    product_id: str
    store_id: str
    title: str
    description: str | None = None
    price: float
    stock: int
    images: list[str] = []
    district: str
    gi_brand: str
    category_id: str | None = None
    status: str
    is_active: bool
    tax_exempt: bool
    weight_kg: float | None = None
    length_cm: float | None = None
    width_cm: float | None = None
    height_cm: float | None = None
    variants: list[VariantResponse] = []
    review_count: int = 0
    average_rating: float = 0.0


class ProductCardResponse(BaseModel):
    product_id: str
    store_id: str
    title: str
    price: float
    stock: int
    district: str | None = None
    gi_brand: str | None = None
    category_id: str | None = None
    image_url: str | None = None
    status: str
    is_active: bool
    rating: float = 0.0
    review_count: int = 0


class ProductPageResponse(BaseModel):
    products: list[ProductCardResponse]
    total: int
    page: int
    page_size: int


class ToggleActiveResponse(BaseModel):
    product_id: str
    is_active: bool


# --- Categories ---


class ProductCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = None


class UpdateProductCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = None


class ProductCategoryResponse(BaseModel):
    category_id: str
    name: str
    slug: str
    description: str | None = None


class DistrictCategoryRequest(BaseModel):
    district: str = Field(..., max_length=100)
    gi_brand: str = Field(..., max_length=100)
    crafts: list[str] = Field(default_factory=list)


class DistrictCategoryResponse(BaseModel):
    category_id: str
    district: str
    gi_brand: str
    crafts: list[str] = []


# --- Vendor offers ---

SCOPE_FIELDS = ("scope_products", "scope_categories", "scope_variants")


def _list_or_none(value):
    """Scope values that are not lists are dropped rather than rejected."""
    return value if isinstance(value, list) else None


class CreateOfferRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "store-001",
                    "name": "Eid sale",
                    "discount_type": "percentage",
                    "discount_value": 15,
                    "scope_type": "all",
                    "start_at": "2026-03-01T00:00:00Z",
                    "end_at": "2026-03-10T23:59:59Z",
                }
            ]
        }
    }

    store_id: str
    name: str = Field(..., max_length=150)
    discount_type: str = Field("percentage", pattern="^(percentage|fixed)$")
    discount_value: float = Field(..., ge=0)
    scope_type: str = Field("products", pattern="^(all|products|categories|variants)$")
    scope_products: list[str] = Field(default_factory=list)
    scope_categories: list[str] = Field(default_factory=list)
    scope_variants: list[str] = Field(default_factory=list)
    start_at: datetime
    end_at: datetime

    @field_validator(*SCOPE_FIELDS, mode="before")
    @classmethod
    def ignore_non_list_scopes(cls, value):
        scopes = _list_or_none(value)
        return [] if scopes is None else scopes


class UpdateOfferRequest(BaseModel):
    name: str | None = Field(None, max_length=150)
    discount_type: str | None = Field(None, pattern="^(percentage|fixed)$")
    discount_value: float | None = Field(None, ge=0)
    scope_type: str | None = Field(None, pattern="^(all|products|categories|variants)$")
    scope_products: list[str] | None = None
    scope_categories: list[str] | None = None
    scope_variants: list[str] | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    is_active: bool | None = None

    @field_validator(*SCOPE_FIELDS, mode="before")
    @classmethod
    def ignore_non_list_scopes(cls, value):
        return _list_or_none(value)


class OfferResponse(BaseModel):
    offer_id: str
    store_id: str
    name: str
    discount_type: str
    discount_value: float
    scope_type: str
    scope_products: list[str] = []
    scope_categories: list[str] = []
    scope_variants: list[str] = []
    start_at: datetime
    end_at: datetime
    is_active: bool


class OfferPageResponse(BaseModel):
    offers: list[OfferResponse]
    total: int


# --- Promotions ---


class PromotionRulePayload(BaseModel):
    rule_type: str = Field(..., pattern="^(min_order_value|min_quantity|specific_product|customer_group)$")
    operator: str = Field("gte", pattern="^(eq|gt|gte|lt|lte)$")
    value: Any = None


class PromotionActionPayload(BaseModel):
    action_type: str = Field(..., pattern="^(percentage_discount|fixed_amount|free_shipping)$")
    value: float = Field(0.0, ge=0)
    target: str | None = None


class CreatePromotionRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Spend 5000, save 10%",
                    "type": "percentage",
                    "value": 10,
                    "priority": 5,
                    "rules": [{"rule_type": "min_order_value", "operator": "gte", "value": 5000}],
                    "actions": [{"action_type": "percentage_discount", "value": 10}],
                }
            ]
        }
    }

    name: str = Field(..., max_length=150)
    code: str | None = Field(None, max_length=50)
    type: str = Field("percentage", pattern="^(percentage|fixed)$")
    value: float = Field(0.0, ge=0)
    priority: int = Field(0, ge=0)
    stackable: bool = False
    status: str | None = Field(None, pattern="^(draft|active|paused|expired)$")
    start_at: datetime | None = None
    end_at: datetime | None = None
    rules: list[PromotionRulePayload] = Field(default_factory=list)
    actions: list[PromotionActionPayload] = Field(default_factory=list)


class PromotionStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(draft|active|paused|expired)$")


class PromotionResponse(BaseModel):
    promotion_id: str
    name: str
    code: str | None = None
    type: str
    value: float
    priority: int
    stackable: bool
    status: str
    start_at: datetime | None = None
    end_at: datetime | None = None
    rules: list[PromotionRulePayload] = []
    actions: list[PromotionActionPayload] = []


# --- Platform settings ---


class PlatformSettingsRequest(BaseModel):
    tax_enabled: bool | None = None
    shipping_enabled: bool | None = None
    cod_limit: float | None = Field(None, ge=0)
    strict_cod_risk_check: bool | None = None


class PlatformSettingsResponse(BaseModel):
    tax_enabled: bool
    shipping_enabled: bool
    cod_limit: float
    strict_cod_risk_check: bool


class TaxRuleRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    rate: float | None = Field(None, ge=0, le=100)
    category: str | None = Field(None, max_length=100)
    province: str | None = Field(None, max_length=100)
    exempt: bool | None = None
    enabled: bool | None = None
    priority: int | None = None


class TaxRuleResponse(BaseModel):
    rule_id: str
    name: str
    rate: float
    category: str | None = None
    province: str | None = None
    exempt: bool
    enabled: bool
    priority: int


class ShippingRuleRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    carrier: str | None = Field(None, max_length=50)
    method: str | None = Field(None, max_length=50)
    zone: str | None = Field(None, max_length=20)
    min_weight_kg: float | None = Field(None, ge=0)
    max_weight_kg: float | None = Field(None, ge=0)
    base_rate: float | None = Field(None, ge=0)
    per_kg_rate: float | None = Field(None, ge=0)
    surcharge: float | None = Field(None, ge=0)
    dimensional_factor: float | None = Field(None, gt=0)
    enabled: bool | None = None
    priority: int | None = None


class ShippingRuleResponse(BaseModel):
    rule_id: str
    name: str
    carrier: str
    method: str
    zone: str
    min_weight_kg: float
    max_weight_kg: float
    base_rate: float
    per_kg_rate: float
    surcharge: float
    dimensional_factor: float | None = None
    enabled: bool
    priority: int


# --- Checkout & cart ---


class LineItem(BaseModel):
    product_id: str
    variant_sku: str | None = None
    quantity: int = Field(1, ge=1)


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "street": "12 Mall Road",
                    "city": "Lahore",
                    "province": "Punjab",
                    "shipping_method": "standard",
                }
            ]
        }
    }

    items: list[LineItem] = Field(default_factory=list)
    street: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = "Pakistan"
    address: str | None = None
    shipping_method: str | None = None
    buyer_id: str | None = None


class DiscountDetail(BaseModel):
    promotion_id: str
    name: str | None = None
    amount: str
    free_shipping: bool = False


class TaxDetail(BaseModel):
    product_id: str
    rate: str
    tax: str


class QuoteResponse(BaseModel):
    subtotal: str
    offer_savings: str
    discount: str
    taxes: str
    shipping: str
    total: str
    discount_details: list[DiscountDetail] = []
    tax_details: list[TaxDetail] = []
    carrier: str | None = None
    province: str | None = None
    method: str | None = None


class CartItemRequest(BaseModel):
    product_id: str
    variant_sku: str | None = None
    quantity: int = 1


class CartLineResponse(BaseModel):
    product_id: str
    variant_sku: str | None = None
    store_id: str | None = None
    quantity: int
    unit_price: str
    line_total: str


class CartResponse(BaseModel):
    buyer_id: str
    items: list[CartLineResponse]
    count: int
    total: str


# --- Buyer lists ---


class ProductRef(BaseModel):
    product_id: str


class WishlistSyncRequest(BaseModel):
    product_ids: list[str] = Field(default_factory=list)


class ProductListResponse(BaseModel):
    buyer_id: str
    product_ids: list[str]


# --- Orders ---


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 1}],
                    "street": "House 5, Street 9, F-7/2",
                    "city": "Islamabad",
                    "province": "Islamabad",
                    "postal_code": "44000",
                    "phone": "03001234567",
                }
            ]
        }
    }

    items: list[LineItem] = Field(default_factory=list)
    from_cart: bool = False
    street: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = "Pakistan"
    phone: str | None = None
    payment_method: str = "cod"
    shipping_method: str | None = None


class PlaceOrderResponse(BaseModel):
    order_id: str
    reference: str
    total: float
    estimated_delivery: str | None = None


class OrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None
    courier_service: str | None = None
    processing_estimate: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class OrderItemResponse(BaseModel):
    product_id: str
    store_id: str
    variant_sku: str | None = None
    variant_attributes: dict[str, Any] | None = None
    title: str
    quantity: int
    unit_price: float


class OrderAddressResponse(BaseModel):
    street: str
    city: str
    province: str
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    reference: str
    buyer_id: str
    status: str
    items: list[OrderItemResponse]
    shipping_address: OrderAddressResponse | None = None
    subtotal: float
    offer_savings: float
    discount: float
    tax: float
    shipping: float
    total: float
    tax_details: list[dict[str, Any]] = []
    discount_details: list[dict[str, Any]] = []
    carrier: str | None = None
    payment_method: str
    cod_payment_status: str
    cod_receipt_id: str | None = None
    tracking_number: str | None = None
    courier_service: str | None = None
    estimated_delivery: str | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    placed_at: datetime | None = None
    cancelled_at: datetime | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    buyer_id: str | None = None
    reference: str | None = None
    status: str
    total: float | None = None
    item_count: int
    cod_payment_status: str | None = None
    payment_method: str | None = None
    placed_at: datetime | None = None


class BuyerOrdersResponse(BaseModel):
    buyer_id: str
    orders: list[OrderSummaryResponse]
    total: int


class SaleResponse(BaseModel):
    order_id: str
    store_id: str | None = None
    reference: str | None = None
    item_count: int
    gross_amount: float
    status: str
    placed_at: datetime | None = None


class VendorSalesResponse(BaseModel):
    store_id: str
    sales: list[SaleResponse]
    order_count: int
    gross_amount: float


class CodReceiptResponse(BaseModel):
    order_id: str
    receipt_id: str


class OrderPageResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    total: int


class VendorOrdersResponse(BaseModel):
    orders: list[SaleResponse]
    total: int


# --- Reviews ---


class SubmitReviewRequest(BaseModel):
    rating: float = Field(..., ge=0.5, le=5)
    comment: str


class VoteRequest(BaseModel):
    helpful: bool


class VoteResponse(BaseModel):
    helpful_votes: int
    unhelpful_votes: int


class ReviewResponse(BaseModel):
    review_id: str
    product_id: str
    buyer_id: str
    rating: float
    comment: str
    verified_purchase: bool
    status: str
    helpful_votes: int
    unhelpful_votes: int
    created_at: datetime | None = None


class ReviewListResponse(BaseModel):
    product_id: str
    reviews: list[ReviewResponse]
    review_count: int
    average_rating: float


# --- Search ---


class SuggestionResponse(BaseModel):
    product_id: str
    title: str
    gi_brand: str | None = None
    category_id: str | None = None
    district: str | None = None
    image_url: str | None = None


class SuggestionListResponse(BaseModel):
    suggestions: list[SuggestionResponse]


# --- Analytics ---


class BrandCount(BaseModel):
    brand: str
    count: int


class SkuMetricResponse(BaseModel):
    sku: str
    units: int
    revenue: str
    stock: int


class DailyOrderStatsResponse(BaseModel):
    date: str
    orders_placed: int = 0
    orders_delivered: int = 0
    orders_cancelled: int = 0
    orders_reactivated: int = 0
    placed_value: str
    delivered_revenue: str


class PlatformAnalyticsResponse(BaseModel):
    total_products: int
    total_stores: int
    total_orders: int
    total_revenue: str
    received_orders_value: str
    pending_stores: int
    pending_products: int
    reviews_total: int
    reviews_average: float
    cod_orders: int
    cod_delivered: int
    stores_by_district: dict[str, int]
    top_gi_brands: list[BrandCount]
    sku_metrics: list[SkuMetricResponse]
    daily_orders: list[DailyOrderStatsResponse]


class VendorAnalyticsResponse(BaseModel):
    total_revenue: str
    total_earnings: str
    total_orders: int
    total_products: int
    total_stores: int
