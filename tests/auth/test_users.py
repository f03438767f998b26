from __future__ import annotations

from datetime import timedelta

import pytest

from opsdesk.core.enums import Role
from opsdesk.core.exceptions import AuthorizationError, ValidationError
from opsdesk.extensions import db
from opsdesk.services.user_service import AuthService, UserService

PASSWORD = "Password1"


def test_directory_lists_active_users_only(client, staff, manager, login):
    manager.status = "INACTIVE"
    db.session.commit()
    login(staff)

    resp = client.get("/api/users")

    ids = [u["id"] for u in resp.get_json()]
    assert staff.id in ids
    assert manager.id not in ids


def test_admin_cannot_create_admin(admin):
    with pytest.raises(AuthorizationError, match="Only a Super Admin"):
        UserService.create_user(
            actor=admin,
            data={"email": "a2@opsdesk.test", "password": "Password9", "firstName": "A", "role": "ADMIN"},
        )


def test_super_admin_creates_admin(super_admin):
    user = UserService.create_user(
        actor=super_admin,
        data={"email": "A3@opsdesk.test", "password": "Password9", "firstName": "A", "role": "ADMIN"},
    )
    assert user.role == Role.ADMIN.value
    assert user.email == "a3@opsdesk.test"


def test_duplicate_email_rejected(admin, staff):
    with pytest.raises(ValidationError, match="Email already exists"):
        UserService.create_user(
            actor=admin, data={"email": staff.email, "password": "Password9", "firstName": "Dup"},
        )


def test_staff_cannot_change_own_role(staff):
    with pytest.raises(AuthorizationError):
        UserService.update_user(actor=staff, user_id=staff.id, data={"role": "ADMIN"})
    assert staff.role == Role.STAFF.value


def test_staff_updates_own_profile_fields(staff):
    user = UserService.update_user(actor=staff, user_id=staff.id, data={"phone": "9800000000", "position": "Dev"})
    assert user.phone == "9800000000"
    assert user.position == "Dev"


def test_super_admin_role_is_immutable(admin, super_admin):
    with pytest.raises(AuthorizationError, match="Super Admin"):
        UserService.update_user(actor=admin, user_id=super_admin.id, data={"role": "STAFF"})


def test_admin_can_only_delete_staff(admin, manager, staff):
    with pytest.raises(AuthorizationError, match="only delete Staff"):
        UserService.delete_user(actor=admin, user_id=manager.id)
    UserService.delete_user(actor=admin, user_id=staff.id)


def test_cannot_delete_self(admin):
    with pytest.raises(ValidationError, match="own account"):
        UserService.delete_user(actor=admin, user_id=admin.id)


def test_forced_password_change_clears_flag(make_user):
    user = make_user(must_change_password=True)

    UserService.update_profile(user=user, data={"newPassword": "Changed123", "isForceChange": True})

    assert user.must_change_password is False
    assert user.check_password("Changed123")


def test_voluntary_password_change_needs_current_password(staff):
    with pytest.raises(ValidationError, match="Incorrect current password"):
        UserService.update_profile(user=staff, data={"newPassword": "Changed123", "currentPassword": "nope"})
    UserService.update_profile(user=staff, data={"newPassword": "Changed123", "currentPassword": PASSWORD})
    assert staff.check_password("Changed123")


def test_touch_last_active_is_throttled(staff, fixed_now):
    assert AuthService.touch_last_active(staff, now=fixed_now) is True
    assert AuthService.touch_last_active(staff, now=fixed_now + timedelta(seconds=30)) is False
    assert AuthService.touch_last_active(staff, now=fixed_now + timedelta(seconds=90)) is True


def test_me_endpoint_updates_profile(client, staff, login):
    login(staff)
    resp = client.put("/api/users/me", json={"firstName": "Sitaa"})
    assert resp.status_code == 200
    assert resp.get_json()["firstName"] == "Sitaa"
