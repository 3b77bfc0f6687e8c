"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from identity.api.schemas import (
    ChangeRoleRequest,
    RegisterUserRequest,
    SetActiveRequest,
    ShippingPreferencesResponse,
    StatusResponse,
    UpdateProfileRequest,
    UpdateShippingRequest,
    UserIdResponse,
    UserListResponse,
    UserResponse,
    UserSummary,
)
from identity.projections.user_directory import UserDirectory
from identity.user.access import ChangeRole, DeactivateUser, ReactivateUser
from identity.user.profile import UpdateProfile, UpdateShippingPreferences
from identity.user.registration import RegisterUser
from identity.user.user import User

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201, response_model=UserIdResponse)
async def register_user(body: RegisterUserRequest) -> UserIdResponse:
    command = RegisterUser(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        role=body.role,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@router.get("", response_model=UserListResponse)
async def list_users(role: str | None = None) -> UserListResponse:
    repo = current_domain.repository_for(UserDirectory)
    query = repo._dao.query
    if role:
        query = query.filter(role=role)
    entries = query.order_by("email").limit(None).all().items
    return UserListResponse(
        users=[
            UserSummary(
                user_id=str(e.user_id),
                email=e.email,
                first_name=e.first_name,
                last_name=e.last_name,
                role=e.role,
                is_active=e.is_active,
            )
            for e in entries
        ],
        total=len(entries),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    user = current_domain.repository_for(User).get(user_id)
    prefs = user.shipping_preferences
    return UserResponse(
        user_id=str(user.id),
        email=user.email.address,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone.number if user.phone else None,
        profile_image_url=user.profile_image_url,
        role=user.role,
        is_active=user.is_active,
        shipping_preferences=(
            ShippingPreferencesResponse(
                street=prefs.street,
                city=prefs.city,
                province=prefs.province,
                postal_code=prefs.postal_code,
                country=prefs.country,
            )
            if prefs
            else None
        ),
    )


@router.put("/{user_id}/profile", response_model=StatusResponse)
async def update_profile(user_id: str, body: UpdateProfileRequest) -> StatusResponse:
    command = UpdateProfile(
        user_id=user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        profile_image_url=body.profile_image_url,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.put("/{user_id}/shipping", response_model=StatusResponse)
async def update_shipping(user_id: str, body: UpdateShippingRequest) -> StatusResponse:
    command = UpdateShippingPreferences(
        user_id=user_id,
        street=body.street,
        city=body.city,
        province=body.province,
        postal_code=body.postal_code,
        country=body.country,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.put("/{user_id}/role", response_model=StatusResponse)
async def change_role(user_id: str, body: ChangeRoleRequest) -> StatusResponse:
    current_domain.process(ChangeRole(user_id=user_id, role=body.role), asynchronous=False)
    return StatusResponse()


@router.put("/{user_id}/active", response_model=StatusResponse)
async def set_active(user_id: str, body: SetActiveRequest) -> StatusResponse:
    if body.is_active:
        command = ReactivateUser(user_id=user_id)
    else:
        command = DeactivateUser(user_id=user_id, reason=body.reason or "Deactivated by admin")
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
