"""Order endpoints: placement, fulfilment, cancellation and COD collection."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.access import (
    ROLE_ADMIN,
    ROLE_BUYER,
    ROLE_VENDOR,
    Actor,
    current_actor,
    forbidden,
    owned_store_ids,
    require_admin,
    require_order_access,
    require_self_or_admin,
    require_store_owner,
)
from marketplace.api.schemas import (
    BuyerOrdersResponse,
    CancelOrderRequest,
    CodReceiptResponse,
    OrderAddressResponse,
    OrderItemResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatusRequest,
    OrderSummaryResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    SaleResponse,
    StatusResponse,
    VendorOrdersResponse,
    VendorSalesResponse,
)
from marketplace.catalogue.browse import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from marketplace.order.cancellation import CancelOrder, ReactivateOrder
from marketplace.order.lifecycle import AdvanceOrder
from marketplace.order.order import Order
from marketplace.order.payment import CollectCodPayment
from marketplace.order.placement import PlaceOrder
from marketplace.pricing.money import ZERO, round_money, to_decimal
from marketplace.projections.buyer_orders import all_orders, buyer_order_history
from marketplace.projections.vendor_sales import sales_for_stores, store_sales

router = APIRouter(tags=["orders"])


def _json_list(value) -> list:
    return json.loads(value) if isinstance(value, str) and value else []


def order_summary(row) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_id=str(row.order_id),
        buyer_id=str(row.buyer_id),
        reference=row.reference,
        status=row.status,
        total=row.total,
        item_count=row.item_count or 0,
        cod_payment_status=row.cod_payment_status,
        payment_method=row.payment_method,
        placed_at=row.placed_at,
    )


def sale_response(row) -> SaleResponse:
    return SaleResponse(
        order_id=str(row.order_id),
        store_id=str(row.store_id),
        reference=row.reference,
        item_count=row.item_count or 0,
        gross_amount=row.gross_amount or 0.0,
        status=row.status,
        placed_at=row.placed_at,
    )


def order_response(order) -> OrderResponse:
    address = order.shipping_address
    pricing = order.pricing
    return OrderResponse(
        order_id=str(order.id),
        reference=order.reference,
        buyer_id=str(order.buyer_id),
        status=order.status,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                store_id=str(item.store_id),
                variant_sku=item.variant_sku,
                variant_attributes=json.loads(item.variant_attributes) if item.variant_attributes else None,
                title=item.title,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items
        ],
        shipping_address=(
            OrderAddressResponse(
                street=address.street,
                city=address.city,
                province=address.province,
                postal_code=address.postal_code,
                country=address.country,
                phone=address.phone,
            )
            if address
            else None
        ),
        subtotal=pricing.subtotal,
        offer_savings=pricing.offer_savings or 0.0,
        discount=pricing.discount or 0.0,
        tax=pricing.tax or 0.0,
        shipping=pricing.shipping or 0.0,
        total=pricing.total,
        tax_details=_json_list(order.tax_details),
        discount_details=_json_list(order.discount_details),
        carrier=order.carrier,
        payment_method=order.payment_method,
        cod_payment_status=order.cod_payment_status,
        cod_receipt_id=order.cod_receipt_id,
        tracking_number=order.tracking_number,
        courier_service=order.courier_service,
        estimated_delivery=order.estimated_delivery,
        cancellation_reason=order.cancellation_reason,
        cancelled_by=order.cancelled_by,
        placed_at=order.placed_at,
        cancelled_at=order.cancelled_at,
    )


def _load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@router.post("/orders", status_code=201, response_model=PlaceOrderResponse)
async def place_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> PlaceOrderResponse:
    if actor.id is None:
        raise forbidden("Sign in to place an order")
    command = PlaceOrder(
        buyer_id=actor.id,
        items=[item.model_dump() for item in body.items],
        from_cart=body.from_cart,
        street=body.street,
        city=body.city,
        province=body.province,
        postal_code=body.postal_code,
        country=body.country,
        phone=body.phone,
        payment_method=body.payment_method,
        shipping_method=body.shipping_method,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = _load_order(order_id)
    return PlaceOrderResponse(
        order_id=str(order.id),
        reference=order.reference,
        total=order.pricing.total,
        estimated_delivery=order.estimated_delivery,
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order = _load_order(order_id)
    require_order_access(actor, order, allow_buyer=True)
    return order_response(order)


@router.get("/buyer/{buyer_id}/orders", response_model=BuyerOrdersResponse)
async def list_buyer_orders(buyer_id: str, actor: Actor = Depends(current_actor)) -> BuyerOrdersResponse:
    require_self_or_admin(actor, buyer_id)
    rows = buyer_order_history(buyer_id)
    return BuyerOrdersResponse(buyer_id=buyer_id, orders=[order_summary(row) for row in rows], total=len(rows))


@router.put("/orders/{order_id}/status", response_model=StatusResponse)
async def advance_order(
    order_id: str, body: OrderStatusRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_order_access(actor, _load_order(order_id))
    command = AdvanceOrder(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        courier_service=body.courier_service,
        processing_estimate=body.processing_estimate,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/orders/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    order = _load_order(order_id)
    require_order_access(actor, order, allow_buyer=True)

    if actor.is_admin:
        cancelled_by = ROLE_ADMIN
    elif str(order.buyer_id) == str(actor.id):
        cancelled_by = ROLE_BUYER
    else:
        cancelled_by = ROLE_VENDOR

    current_domain.process(
        CancelOrder(order_id=order_id, reason=body.reason, cancelled_by=cancelled_by),
        asynchronous=False,
    )
    return StatusResponse()


@router.post("/orders/{order_id}/reactivate", response_model=StatusResponse)
async def reactivate_order(order_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_order_access(actor, _load_order(order_id))
    current_domain.process(ReactivateOrder(order_id=order_id, reactivated_by=actor.id), asynchronous=False)
    return StatusResponse()


@router.post("/orders/{order_id}/cod/collect", response_model=CodReceiptResponse)
async def collect_cod_payment(order_id: str, actor: Actor = Depends(current_actor)) -> CodReceiptResponse:
    require_order_access(actor, _load_order(order_id))
    receipt_id = current_domain.process(CollectCodPayment(order_id=order_id), asynchronous=False)
    return CodReceiptResponse(order_id=order_id, receipt_id=receipt_id)


@router.get("/vendor/{store_id}/sales", response_model=VendorSalesResponse)
async def vendor_sales(store_id: str, actor: Actor = Depends(current_actor)) -> VendorSalesResponse:
    require_store_owner(actor, store_id)
    rows = store_sales(store_id)
    gross = sum((to_decimal(row.gross_amount) for row in rows), ZERO)
    return VendorSalesResponse(
        store_id=store_id,
        sales=[sale_response(row) for row in rows],
        order_count=len(rows),
        gross_amount=float(round_money(gross)),
    )


@router.get("/vendor/orders", response_model=VendorOrdersResponse)
async def vendor_orders(
    store_id: str | None = None,
    status: str | None = None,
    actor: Actor = Depends(current_actor),
) -> VendorOrdersResponse:
    """Sales across the vendor's stores, or one store when ``store_id`` is given."""
    if store_id:
        require_store_owner(actor, store_id)
        store_ids = {store_id}
    else:
        store_ids = owned_store_ids(actor)
    rows = sales_for_stores(store_ids, status=status) if store_ids else []
    return VendorOrdersResponse(orders=[sale_response(row) for row in rows], total=len(rows))


@router.get("/admin/orders", response_model=OrderPageResponse)
async def admin_orders(
    status: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> OrderPageResponse:
    require_admin(actor)
    result = all_orders(status=status, page=page, page_size=page_size)
    return OrderPageResponse(orders=[order_summary(row) for row in result.items], total=result.total)
