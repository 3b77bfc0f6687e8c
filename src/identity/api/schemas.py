"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterUserRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "ayesha@example.pk",
                    "first_name": "Ayesha",
                    "last_name": "Khan",
                    "phone": "+92 300 1234567",
                    "role": "buyer",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: str | None = Field(None, max_length=20)
    role: str = Field("buyer", pattern="^(buyer|vendor)$")


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    profile_image_url: str | None = Field(None, max_length=500)


class UpdateShippingRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "street": "House 12, Street 4",
                    "city": "Multan",
                    "province": "Punjab",
                    "postal_code": "60000",
                    "country": "Pakistan",
                }
            ]
        }
    }

    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    province: str = Field(..., max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., pattern="^(buyer|vendor|admin)$")


class SetActiveRequest(BaseModel):
    is_active: bool
    reason: str | None = Field(None, max_length=500)


# --- Response Schemas ---


class UserIdResponse(BaseModel):
    user_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ShippingPreferencesResponse(BaseModel):
    street: str
    city: str
    province: str
    postal_code: str | None = None
    country: str


class UserResponse(BaseModel):
    user_id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    profile_image_url: str | None = None
    role: str
    is_active: bool
    shipping_preferences: ShippingPreferencesResponse | None = None


class UserSummary(BaseModel):
    user_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool


class UserListResponse(BaseModel):
    users: list[UserSummary]
    total: int
