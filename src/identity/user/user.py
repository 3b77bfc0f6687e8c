"""User aggregate root with the ShippingPreferences value object."""

from datetime import datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, ValueObject

from identity.domain import identity
from identity.shared.email import EmailAddress, normalize_email
from identity.shared.phone import PhoneNumber

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

DEFAULT_COUNTRY = "Pakistan"


class UserRole(Enum):
    BUYER = "buyer"
    VENDOR = "vendor"
    ADMIN = "admin"


@identity.value_object(part_of="User")
class ShippingPreferences:
    """The last delivery address a buyer used, offered again at checkout."""

    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    province: String(required=True, max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100, default=DEFAULT_COUNTRY)


@identity.aggregate
class User:
    """A person using the marketplace as a buyer, a vendor or an admin.

    Vendors own stores in the marketplace context and admins configure the
    platform; both are referred to from there only by id.
    """

    email: ValueObject(EmailAddress, required=True)
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    phone: ValueObject(PhoneNumber)
    profile_image_url: String(max_length=500)
    role: String(choices=UserRole, default=UserRole.BUYER.value)
    is_active: Boolean(default=True)
    deactivation_reason: String(max_length=500)
    shipping_preferences: ValueObject(ShippingPreferences)
    registered_at: DateTime(default=datetime.now)
    updated_at: DateTime()

    @classmethod
    def register(cls, email, first_name, last_name, phone=None, role=UserRole.BUYER.value):
        from identity.user.events import UserRegistered

        if role == UserRole.ADMIN.value:
            raise ValidationError({"role": ["Admin accounts cannot be self-registered"]})

        address = normalize_email(email)
        now = datetime.now()
        user = cls(
            email=EmailAddress(address=address),
            first_name=first_name,
            last_name=last_name,
            phone=PhoneNumber(number=phone) if phone else None,
            role=role,
            registered_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=user.id,
                email=address,
                first_name=first_name,
                last_name=last_name,
                role=role,
                registered_at=now,
            )
        )
        return user

    def update_profile(self, first_name=_UNSET, last_name=_UNSET, phone=_UNSET, profile_image_url=_UNSET):
        from identity.user.events import ProfileUpdated

        if first_name is not _UNSET and first_name:
            self.first_name = first_name
        if last_name is not _UNSET and last_name:
            self.last_name = last_name
        if phone is not _UNSET:
            self.phone = PhoneNumber(number=phone) if phone else None
        if profile_image_url is not _UNSET:
            self.profile_image_url = profile_image_url

        self.updated_at = datetime.now()
        self.raise_(
            ProfileUpdated(
                user_id=self.id,
                first_name=self.first_name,
                last_name=self.last_name,
                phone=self.phone.number if self.phone else None,
                profile_image_url=self.profile_image_url,
            )
        )

    def update_shipping_preferences(self, street, city, province, postal_code=None, country=None):
        from identity.user.events import ShippingPreferencesUpdated

        country = country or DEFAULT_COUNTRY
        self.shipping_preferences = ShippingPreferences(
            street=street,
            city=city,
            province=province,
            postal_code=postal_code,
            country=country,
        )
        self.updated_at = datetime.now()
        self.raise_(
            ShippingPreferencesUpdated(
                user_id=self.id,
                street=street,
                city=city,
                province=province,
                postal_code=postal_code,
                country=country,
            )
        )

    def change_role(self, role):
        from identity.user.events import RoleChanged

        try:
            new_role = UserRole(role)
        except ValueError:
            raise ValidationError({"role": [f"Unknown role: {role}"]})

        if new_role.value == self.role:
            raise ValidationError({"role": [f"User is already a {self.role}"]})

        previous = self.role
        self.role = new_role.value
        now = datetime.now()
        self.updated_at = now
        self.raise_(
            RoleChanged(
                user_id=self.id,
                previous_role=previous,
                new_role=new_role.value,
                changed_at=now,
            )
        )

    def deactivate(self, reason):
        from identity.user.events import UserDeactivated

        if not self.is_active:
            raise ValidationError({"is_active": ["User is already inactive"]})

        self.is_active = False
        self.deactivation_reason = reason
        now = datetime.now()
        self.updated_at = now
        self.raise_(UserDeactivated(user_id=self.id, reason=reason, deactivated_at=now))

    def reactivate(self):
        from identity.user.events import UserReactivated

        if self.is_active:
            raise ValidationError({"is_active": ["User is already active"]})

        self.is_active = True
        self.deactivation_reason = None
        now = datetime.now()
        self.updated_at = now
        self.raise_(UserReactivated(user_id=self.id, reactivated_at=now))
