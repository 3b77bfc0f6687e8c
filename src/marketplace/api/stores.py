"""Store endpoints."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.access import (
    ROLE_ADMIN,
    ROLE_VENDOR,
    Actor,
    current_actor,
    require_admin,
    require_role,
    require_store_owner,
)
from marketplace.api.schemas import (
    IdResponse,
    OpenStoreRequest,
    StatusResponse,
    StoreCodRequest,
    StoreResponse,
    StoreStatusRequest,
    UpdateStoreRequest,
)
from marketplace.store.management import ChangeStoreStatus, OpenStore, SetStoreCod, UpdateStore
from marketplace.store.store import Store, StoreStatus

router = APIRouter(tags=["stores"])


def store_response(store) -> StoreResponse:
    return StoreResponse(
        store_id=str(store.id),
        vendor_id=str(store.vendor_id),
        name=store.name,
        description=store.description,
        logo_url=store.logo_url,
        district=store.district,
        gi_brands=list(store.gi_brands or []),
        status=store.status,
        deactivation_reason=store.deactivation_reason,
        cod_enabled=bool(store.cod_enabled),
        cod_ready=store.is_cod_ready,
    )


@router.post("/stores", status_code=201, response_model=IdResponse)
async def open_store(body: OpenStoreRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_role(actor, ROLE_VENDOR, ROLE_ADMIN)
    # Admins may open a store on a vendor's behalf
    vendor_id = body.vendor_id if actor.is_admin and body.vendor_id else actor.id
    command = OpenStore(
        vendor_id=vendor_id,
        name=body.name,
        district=body.district,
        gi_brands=body.gi_brands,
        description=body.description,
        logo_url=body.logo_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@router.get("/stores", response_model=list[StoreResponse])
async def list_stores(
    status: str | None = None,
    vendor_id: str | None = None,
    actor: Actor = Depends(current_actor),
) -> list[StoreResponse]:
    filters = {}
    if actor.is_admin:
        if status:
            filters["status"] = status
    else:
        filters["status"] = StoreStatus.APPROVED.value
    if vendor_id:
        filters["vendor_id"] = vendor_id

    query = current_domain.repository_for(Store)._dao.query
    if filters:
        query = query.filter(**filters)
    stores = query.order_by("name").limit(None).all().items
    return [store_response(s) for s in stores]


@router.get("/stores/{store_id}", response_model=StoreResponse)
async def get_store(store_id: str) -> StoreResponse:
    return store_response(current_domain.repository_for(Store).get(store_id))


@router.put("/stores/{store_id}", response_model=StatusResponse)
async def update_store(
    store_id: str, body: UpdateStoreRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_store_owner(actor, store_id)
    command = UpdateStore(
        store_id=store_id,
        name=body.name,
        description=body.description,
        logo_url=body.logo_url,
        district=body.district,
        gi_brands=body.gi_brands or [],
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.put("/admin/stores/{store_id}/status", response_model=StatusResponse)
async def change_store_status(
    store_id: str, body: StoreStatusRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    current_domain.process(
        ChangeStoreStatus(store_id=store_id, status=body.status, reason=body.reason),
        asynchronous=False,
    )
    return StatusResponse()


@router.put("/stores/{store_id}/cod", response_model=StatusResponse)
async def set_store_cod(store_id: str, body: StoreCodRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_store_owner(actor, store_id)
    current_domain.process(SetStoreCod(store_id=store_id, enabled=body.enabled), asynchronous=False)
    return StatusResponse()
