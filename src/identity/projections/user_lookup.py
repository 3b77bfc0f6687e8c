"""User lookup — find a user by email, used to keep emails unique."""

from protean.core.projector import on
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.events import UserRegistered
from identity.user.user import User


@identity.projection
class UserLookup:
    email: Identifier(identifier=True, required=True)
    user_id: String(required=True)


@identity.projector(projector_for=UserLookup, aggregates=[User])
class UserLookupProjector:
    @on(UserRegistered)
    def on_user_registered(self, event):
        current_domain.repository_for(UserLookup).add(
            UserLookup(
                email=event.email,
                user_id=event.user_id,
            )
        )
