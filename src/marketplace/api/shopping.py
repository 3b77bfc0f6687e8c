"""Checkout quote, cart and buyer list endpoints."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.access import Actor, current_actor, require_self_or_admin
from marketplace.api.schemas import (
    CartItemRequest,
    CartLineResponse,
    CartResponse,
    CheckoutRequest,
    ProductListResponse,
    ProductRef,
    QuoteResponse,
    WishlistSyncRequest,
)
from marketplace.cart.management import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem, summarize_cart
from marketplace.checkout.calculator import CheckoutCalculator, CheckoutLine
from marketplace.lists.lists import CompareList, RecentlyViewed, Wishlist
from marketplace.lists.management import (
    AddToCompare,
    AddToWishlist,
    ClearCompare,
    RecordProductView,
    RemoveFromCompare,
    RemoveFromWishlist,
    SyncWishlist,
    load_list,
)
from marketplace.pricing.money import format_money
from marketplace.pricing.province import compose_address

checkout_router = APIRouter(tags=["checkout"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
lists_router = APIRouter(tags=["lists"])


@checkout_router.post("/checkout/calculate", response_model=QuoteResponse)
async def calculate(body: CheckoutRequest) -> QuoteResponse:
    lines = [CheckoutLine(product_id=i.product_id, quantity=i.quantity, variant_sku=i.variant_sku) for i in body.items]
    address = body.address or compose_address(body.street, body.city, body.province, body.postal_code, body.country)
    quote = CheckoutCalculator().quote(
        lines,
        address=address,
        province=body.province,
        method=body.shipping_method,
        buyer_id=body.buyer_id,
    )
    return QuoteResponse(**quote.as_dict())


# --- Cart ---


def _cart_response(buyer_id) -> CartResponse:
    summary = summarize_cart(buyer_id)
    return CartResponse(
        buyer_id=summary["buyer_id"],
        items=[
            CartLineResponse(
                product_id=line.product_id,
                variant_sku=line.variant_sku,
                store_id=line.store_id,
                quantity=line.quantity,
                unit_price=format_money(line.unit_price),
                line_total=format_money(line.line_total),
            )
            for line in summary["items"]
        ],
        count=summary["count"],
        total=format_money(summary["total"]),
    )


@cart_router.get("/{buyer_id}", response_model=CartResponse)
async def get_cart(buyer_id: str, actor: Actor = Depends(current_actor)) -> CartResponse:
    require_self_or_admin(actor, buyer_id)
    return _cart_response(buyer_id)


@cart_router.post("/{buyer_id}", response_model=CartResponse)
async def add_to_cart(buyer_id: str, body: CartItemRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    require_self_or_admin(actor, buyer_id)
    command = AddToCart(
        buyer_id=buyer_id,
        product_id=body.product_id,
        variant_sku=body.variant_sku,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(buyer_id)


@cart_router.put("/{buyer_id}", response_model=CartResponse)
async def update_cart_item(buyer_id: str, body: CartItemRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    require_self_or_admin(actor, buyer_id)
    command = UpdateCartItem(
        buyer_id=buyer_id,
        product_id=body.product_id,
        variant_sku=body.variant_sku,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(buyer_id)


@cart_router.delete("/{buyer_id}", response_model=CartResponse)
async def remove_from_cart(
    buyer_id: str,
    product_id: str | None = None,
    variant_sku: str | None = None,
    actor: Actor = Depends(current_actor),
) -> CartResponse:
    """Remove one product's lines, or empty the cart when no product is named."""
    require_self_or_admin(actor, buyer_id)
    if product_id:
        command = RemoveFromCart(buyer_id=buyer_id, product_id=product_id, variant_sku=variant_sku)
    else:
        command = ClearCart(buyer_id=buyer_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(buyer_id)


# --- Wishlist, compare and recently viewed ---


def _list_response(buyer_id, product_ids) -> ProductListResponse:
    return ProductListResponse(buyer_id=buyer_id, product_ids=list(product_ids or []))


@lists_router.get("/wishlist/{buyer_id}", response_model=ProductListResponse)
async def get_wishlist(buyer_id: str, actor: Actor = Depends(current_actor)) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    return _list_response(buyer_id, load_list(Wishlist, buyer_id).product_ids)


@lists_router.post("/wishlist/{buyer_id}", response_model=ProductListResponse)
async def add_to_wishlist(
    buyer_id: str, body: ProductRef, actor: Actor = Depends(current_actor)
) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    ids = current_domain.process(AddToWishlist(buyer_id=buyer_id, product_id=body.product_id), asynchronous=False)
    return _list_response(buyer_id, ids)


@lists_router.delete("/wishlist/{buyer_id}/{product_id}", response_model=ProductListResponse)
async def remove_from_wishlist(
    buyer_id: str, product_id: str, actor: Actor = Depends(current_actor)
) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    ids = current_domain.process(RemoveFromWishlist(buyer_id=buyer_id, product_id=product_id), asynchronous=False)
    return _list_response(buyer_id, ids)


@lists_router.post("/wishlist/{buyer_id}/sync", response_model=ProductListResponse)
async def sync_wishlist(
    buyer_id: str, body: WishlistSyncRequest, actor: Actor = Depends(current_actor)
) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    ids = current_domain.process(SyncWishlist(buyer_id=buyer_id, product_ids=body.product_ids), asynchronous=False)
    return _list_response(buyer_id, ids)


@lists_router.get("/compare/{buyer_id}", response_model=ProductListResponse)
async def get_compare(buyer_id: str, actor: Actor = Depends(current_actor)) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    return _list_response(buyer_id, load_list(CompareList, buyer_id).product_ids)


@lists_router.post("/compare/{buyer_id}", response_model=ProductListResponse)
async def add_to_compare(
    buyer_id: str, body: ProductRef, actor: Actor = Depends(current_actor)
) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    ids = current_domain.process(AddToCompare(buyer_id=buyer_id, product_id=body.product_id), asynchronous=False)
    return _list_response(buyer_id, ids)


@lists_router.delete("/compare/{buyer_id}", response_model=ProductListResponse)
async def remove_from_compare(
    buyer_id: str, product_id: str | None = None, actor: Actor = Depends(current_actor)
) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    if product_id:
        command = RemoveFromCompare(buyer_id=buyer_id, product_id=product_id)
    else:
        command = ClearCompare(buyer_id=buyer_id)
    ids = current_domain.process(command, asynchronous=False)
    return _list_response(buyer_id, ids)


@lists_router.get("/recently-viewed/{buyer_id}", response_model=ProductListResponse)
async def get_recently_viewed(buyer_id: str, actor: Actor = Depends(current_actor)) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    return _list_response(buyer_id, load_list(RecentlyViewed, buyer_id).product_ids)


@lists_router.post("/recently-viewed/{buyer_id}", response_model=ProductListResponse)
async def record_view(buyer_id: str, body: ProductRef, actor: Actor = Depends(current_actor)) -> ProductListResponse:
    require_self_or_admin(actor, buyer_id)
    ids = current_domain.process(RecordProductView(buyer_id=buyer_id, product_id=body.product_id), asynchronous=False)
    return _list_response(buyer_id, ids)
