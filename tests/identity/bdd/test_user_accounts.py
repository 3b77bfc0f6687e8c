"""BDD tests for user accounts."""

from identity.user.user import User
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/user_accounts.feature")


@when(parsers.cfparse('"{email}" registers with role "{role}"'), target_fixture="user")
def register(email, role, error):
    try:
        return User.register(email=email, first_name="Test", last_name="User", role=role)
    except ValidationError as exc:
        error["exc"] = exc
        return None


@when(parsers.cfparse('the role is changed to "{role}"'))
def change_role(user, role):
    user.change_role(role)


@when(parsers.cfparse('the account is deactivated for "{reason}"'))
def deactivate(user, reason, error):
    try:
        user.deactivate(reason)
    except ValidationError as exc:
        error["exc"] = exc


@then(parsers.cfparse('the account email is "{email}"'))
def account_email(user, email):
    assert user.email.address == email


@then(parsers.cfparse('the account role is "{role}"'))
def account_role(user, role):
    assert user.role == role
