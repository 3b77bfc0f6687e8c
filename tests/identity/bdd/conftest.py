"""Shared BDD fixtures and step definitions for the Identity domain."""

import pytest
from identity.user.user import User
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given(parsers.cfparse('a registered {role} "{email}"'), target_fixture="user")
def registered_user(role, email):
    user = User.register(email=email, first_name="Test", last_name="User", role=role)
    user._events.clear()
    return user


@then("the action fails with a validation error")
def action_fails(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('a {event_name} event is raised'))
def event_raised(user, event_name):
    assert any(e.__class__.__name__ == event_name for e in user._events)
