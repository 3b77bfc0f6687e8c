"""User registration — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.domain import identity, logger
from identity.projections.user_lookup import UserLookup
from identity.shared.email import normalize_email
from identity.user.user import User, UserRole


@identity.command(part_of="User")
class RegisterUser:
    """Create a buyer or vendor account."""

    email: String(required=True, max_length=254)
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    phone: String(max_length=20)
    role: String(choices=UserRole, default=UserRole.BUYER.value)


@identity.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        email = normalize_email(command.email)
        try:
            current_domain.repository_for(UserLookup).get(email)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"email": ["An account with this email already exists"]})

        user = User.register(
            email=email,
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
            role=command.role,
        )
        current_domain.repository_for(User).add(user)
        logger.info("user_registered", user_id=str(user.id), role=user.role)
        return str(user.id)
