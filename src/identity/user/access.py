"""Role changes and account activation — admin commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity, logger
from identity.user.user import User


@identity.command(part_of="User")
class ChangeRole:
    user_id: Identifier(required=True)
    role: String(required=True, max_length=20)


@identity.command(part_of="User")
class DeactivateUser:
    user_id: Identifier(required=True)
    reason: String(required=True, max_length=500)


@identity.command(part_of="User")
class ReactivateUser:
    user_id: Identifier(required=True)


@identity.command_handler(part_of=User)
class UserAccessHandler:
    @handle(ChangeRole)
    def change_role(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.change_role(command.role)
        repo.add(user)
        logger.info("user_role_changed", user_id=str(user.id), role=user.role)

    @handle(DeactivateUser)
    def deactivate_user(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.deactivate(command.reason)
        repo.add(user)

    @handle(ReactivateUser)
    def reactivate_user(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.reactivate()
        repo.add(user)
