"""Application tests for the user command handlers and the UserDirectory projection."""

import pytest
from identity.projections.user_directory import UserDirectory
from identity.user.access import ChangeRole, DeactivateUser, ReactivateUser
from identity.user.profile import UpdateProfile, UpdateShippingPreferences
from identity.user.registration import RegisterUser
from identity.user.user import User
from protean import current_domain
from protean.exceptions import ValidationError


def _register(**overrides):
    defaults = {
        "email": "bilal@example.pk",
        "first_name": "Bilal",
        "last_name": "Ahmed",
    }
    defaults.update(overrides)
    return current_domain.process(RegisterUser(**defaults), asynchronous=False)


class TestRegisterUser:
    def test_register_persists_user(self):
        user_id = _register()
        user = current_domain.repository_for(User).get(user_id)
        assert user.email.address == "bilal@example.pk"
        assert user.role == "buyer"

    def test_duplicate_email_rejected_case_insensitively(self):
        _register(email="dupe@example.pk")
        with pytest.raises(ValidationError) as exc:
            _register(email="DUPE@example.pk")
        assert "email" in exc.value.messages

    def test_directory_entry_created(self):
        user_id = _register(email="dir@example.pk", role="vendor")
        entry = current_domain.repository_for(UserDirectory).get(user_id)
        assert entry.email == "dir@example.pk"
        assert entry.role == "vendor"
        assert entry.is_active is True


class TestUpdateProfile:
    def test_only_given_fields_change(self):
        user_id = _register(email="profile@example.pk")
        current_domain.process(UpdateProfile(user_id=user_id, first_name="Bilal Z."), asynchronous=False)
        user = current_domain.repository_for(User).get(user_id)
        assert user.first_name == "Bilal Z."
        assert user.last_name == "Ahmed"

        entry = current_domain.repository_for(UserDirectory).get(user_id)
        assert entry.first_name == "Bilal Z."

    def test_shipping_preferences_saved(self):
        user_id = _register(email="ship@example.pk")
        current_domain.process(
            UpdateShippingPreferences(
                user_id=user_id,
                street="House 7, Gulgasht Colony",
                city="Multan",
                province="Punjab",
                postal_code="60000",
            ),
            asynchronous=False,
        )
        prefs = current_domain.repository_for(User).get(user_id).shipping_preferences
        assert prefs.province == "Punjab"
        assert prefs.country == "Pakistan"


class TestUserAccess:
    def test_change_role_updates_directory(self):
        user_id = _register(email="role@example.pk")
        current_domain.process(ChangeRole(user_id=user_id, role="admin"), asynchronous=False)
        assert current_domain.repository_for(User).get(user_id).role == "admin"
        assert current_domain.repository_for(UserDirectory).get(user_id).role == "admin"

    def test_deactivate_and_reactivate(self):
        user_id = _register(email="active@example.pk")
        current_domain.process(DeactivateUser(user_id=user_id, reason="Chargebacks"), asynchronous=False)
        assert current_domain.repository_for(UserDirectory).get(user_id).is_active is False

        current_domain.process(ReactivateUser(user_id=user_id), asynchronous=False)
        user = current_domain.repository_for(User).get(user_id)
        assert user.is_active is True
        assert current_domain.repository_for(UserDirectory).get(user_id).is_active is True
