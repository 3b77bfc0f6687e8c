"""Vendor offer and platform promotion endpoints."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.access import Actor, current_actor, owned_store_ids, require_admin, require_store_owner
from marketplace.api.schemas import (
    CreateOfferRequest,
    CreatePromotionRequest,
    IdResponse,
    OfferPageResponse,
    OfferResponse,
    PromotionActionPayload,
    PromotionResponse,
    PromotionRulePayload,
    PromotionStatusRequest,
    StatusResponse,
    UpdateOfferRequest,
)
from marketplace.catalogue.browse import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from marketplace.offer.management import CreateOffer, DeleteOffer, UpdateOffer
from marketplace.offer.offer import Offer
from marketplace.pricing.clock import utc_now
from marketplace.promotion.management import ChangePromotionStatus, CreatePromotion
from marketplace.promotion.promotion import Promotion

offer_router = APIRouter(tags=["offers"])
promotion_router = APIRouter(tags=["promotions"])


def offer_response(offer) -> OfferResponse:
    return OfferResponse(
        offer_id=str(offer.id),
        store_id=str(offer.store_id),
        name=offer.name,
        discount_type=offer.discount_type,
        discount_value=offer.discount_value,
        scope_type=offer.scope_type,
        scope_products=list(offer.scope_products or []),
        scope_categories=list(offer.scope_categories or []),
        scope_variants=list(offer.scope_variants or []),
        start_at=offer.start_at,
        end_at=offer.end_at,
        is_active=bool(offer.is_active),
    )


def _offer_page(store_ids, page: int, page_size: int):
    """Newest offers first for the given stores."""
    query = (
        current_domain.repository_for(Offer)
        ._dao.query.filter(store_id__in=list(store_ids))
        .order_by("-created_at")
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return query.all()


# --- Vendor offers ---


@offer_router.get("/vendor/offers", response_model=OfferPageResponse)
async def list_vendor_offers(
    store_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> OfferPageResponse:
    if store_id:
        require_store_owner(actor, store_id)
        store_ids = {store_id}
    else:
        store_ids = owned_store_ids(actor)
    if not store_ids:
        return OfferPageResponse(offers=[], total=0)

    result = _offer_page(store_ids, page, page_size)
    return OfferPageResponse(offers=[offer_response(o) for o in result.items], total=result.total)


@offer_router.post("/vendor/offers", status_code=201, response_model=IdResponse)
async def create_offer(body: CreateOfferRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_store_owner(actor, body.store_id)
    command = CreateOffer(**body.model_dump())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@offer_router.patch("/vendor/offers/{offer_id}", response_model=StatusResponse)
async def update_offer(
    offer_id: str, body: UpdateOfferRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    offer = current_domain.repository_for(Offer).get(offer_id)
    require_store_owner(actor, offer.store_id)
    command = UpdateOffer(offer_id=offer_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@offer_router.delete("/vendor/offers/{offer_id}", response_model=StatusResponse)
async def delete_offer(offer_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    offer = current_domain.repository_for(Offer).get(offer_id)
    require_store_owner(actor, offer.store_id)
    current_domain.process(DeleteOffer(offer_id=offer_id), asynchronous=False)
    return StatusResponse()


@offer_router.get("/stores/{store_id}/offers/active", response_model=list[OfferResponse])
async def active_store_offers(store_id: str) -> list[OfferResponse]:
    now = utc_now()
    offers = (
        current_domain.repository_for(Offer)
        ._dao.query.filter(store_id=store_id, is_active=True)
        .order_by("created_at")
        .limit(None)
        .all()
        .items
    )
    return [offer_response(o) for o in offers if o.is_live(now)]


# --- Promotions ---


def promotion_response(promotion) -> PromotionResponse:
    return PromotionResponse(
        promotion_id=str(promotion.id),
        name=promotion.name,
        code=promotion.code,
        type=promotion.type,
        value=promotion.value or 0.0,
        priority=promotion.priority or 0,
        stackable=bool(promotion.stackable),
        status=promotion.status,
        start_at=promotion.start_at,
        end_at=promotion.end_at,
        rules=[
            PromotionRulePayload(rule_type=r.rule_type, operator=r.operator, value=r.parsed_value)
            for r in promotion.rules
        ],
        actions=[
            PromotionActionPayload(action_type=a.action_type, value=a.value or 0.0, target=a.target)
            for a in promotion.actions
        ],
    )


@promotion_router.get("/admin/promotions", response_model=list[PromotionResponse])
async def list_promotions(status: str | None = None, actor: Actor = Depends(current_actor)) -> list[PromotionResponse]:
    require_admin(actor)
    query = current_domain.repository_for(Promotion)._dao.query
    if status:
        query = query.filter(status=status)
    promotions = query.order_by("-priority").limit(None).all().items
    return [promotion_response(p) for p in promotions]


@promotion_router.post("/admin/promotions", status_code=201, response_model=IdResponse)
async def create_promotion(body: CreatePromotionRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_admin(actor)
    command = CreatePromotion(
        name=body.name,
        code=body.code,
        type=body.type,
        value=body.value,
        priority=body.priority,
        stackable=body.stackable,
        status=body.status,
        start_at=body.start_at,
        end_at=body.end_at,
        rules=[r.model_dump() for r in body.rules],
        actions=[a.model_dump(exclude_none=True) for a in body.actions],
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@promotion_router.put("/admin/promotions/{promotion_id}/status", response_model=StatusResponse)
async def change_promotion_status(
    promotion_id: str, body: PromotionStatusRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    current_domain.process(
        ChangePromotionStatus(promotion_id=promotion_id, status=body.status),
        asynchronous=False,
    )
    return StatusResponse()
