"""User directory — the admin user list."""

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.events import (
    ProfileUpdated,
    RoleChanged,
    UserDeactivated,
    UserReactivated,
    UserRegistered,
)
from identity.user.user import User


@identity.projection
class UserDirectory:
    user_id: Identifier(identifier=True, required=True)
    email: String(required=True)
    first_name: String(required=True)
    last_name: String(required=True)
    phone: String()
    role: String(required=True)
    is_active: Boolean(default=True)
    registered_at: DateTime()


@identity.projector(projector_for=UserDirectory, aggregates=[User])
class UserDirectoryProjector:
    @on(UserRegistered)
    def on_user_registered(self, event):
        current_domain.repository_for(UserDirectory).add(
            UserDirectory(
                user_id=event.user_id,
                email=event.email,
                first_name=event.first_name,
                last_name=event.last_name,
                role=event.role,
                is_active=True,
                registered_at=event.registered_at,
            )
        )

    @on(ProfileUpdated)
    def on_profile_updated(self, event):
        repo = current_domain.repository_for(UserDirectory)
        entry = repo.get(event.user_id)
        entry.first_name = event.first_name
        entry.last_name = event.last_name
        entry.phone = event.phone
        repo.add(entry)

    @on(RoleChanged)
    def on_role_changed(self, event):
        repo = current_domain.repository_for(UserDirectory)
        entry = repo.get(event.user_id)
        entry.role = event.new_role
        repo.add(entry)

    @on(UserDeactivated)
    def on_user_deactivated(self, event):
        repo = current_domain.repository_for(UserDirectory)
        entry = repo.get(event.user_id)
        entry.is_active = False
        repo.add(entry)

    @on(UserReactivated)
    def on_user_reactivated(self, event):
        repo = current_domain.repository_for(UserDirectory)
        entry = repo.get(event.user_id)
        entry.is_active = True
        repo.add(entry)
