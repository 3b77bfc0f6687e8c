"""Profile and shipping preference updates — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.user import User


@identity.command(part_of="User")
class UpdateProfile:
    user_id: Identifier(required=True)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    phone: String(max_length=20)
    profile_image_url: String(max_length=500)


@identity.command(part_of="User")
class UpdateShippingPreferences:
    """Remember the buyer's delivery address for the next checkout."""

    user_id: Identifier(required=True)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    province: String(required=True, max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)


@identity.command_handler(part_of=User)
class ProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        changes = {}
        for field_name in ("first_name", "last_name", "phone", "profile_image_url"):
            value = getattr(command, field_name)
            if value is not None:
                changes[field_name] = value

        user.update_profile(**changes)
        repo.add(user)

    @handle(UpdateShippingPreferences)
    def update_shipping_preferences(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_shipping_preferences(
            street=command.street,
            city=command.city,
            province=command.province,
            postal_code=command.postal_code,
            country=command.country,
        )
        repo.add(user)
