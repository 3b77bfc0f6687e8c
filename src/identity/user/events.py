"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from identity.domain import identity


@identity.event(part_of="User")
class UserRegistered:
    """A new buyer, vendor or admin account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    first_name: String(required=True)
    last_name: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@identity.event(part_of="User")
class ProfileUpdated:
    """A user's name, phone or picture changed."""

    __version__ = 1

    user_id: Identifier(required=True)
    first_name: String(required=True)
    last_name: String(required=True)
    phone: String()
    profile_image_url: String()


@identity.event(part_of="User")
class ShippingPreferencesUpdated:
    """A buyer saved the address used to pre-fill checkout."""

    __version__ = 1

    user_id: Identifier(required=True)
    street: String(required=True)
    city: String(required=True)
    province: String(required=True)
    postal_code: String()
    country: String(required=True)


@identity.event(part_of="User")
class RoleChanged:
    """An admin moved a user to another role."""

    __version__ = 1

    user_id: Identifier(required=True)
    previous_role: String(required=True)
    new_role: String(required=True)
    changed_at: DateTime(required=True)


@identity.event(part_of="User")
class UserDeactivated:
    __version__ = 1

    user_id: Identifier(required=True)
    reason: String(required=True)
    deactivated_at: DateTime(required=True)


@identity.event(part_of="User")
class UserReactivated:
    __version__ = 1

    user_id: Identifier(required=True)
    reactivated_at: DateTime(required=True)
