from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, validate_enum, validate_password, validate_string
from ..core.constants import LAST_ACTIVE_REFRESH_SECONDS
from ..core.enums import Role, UserStatus, values_of
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.user import User
from .base import get_or_404

log = logging.getLogger(__name__)

PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
    "department": "department",
    "position": "position",
    "avatar": "avatar",
}


class AuthService:
    """Use case: authenticate a user (login)."""

    @staticmethod
    def authenticate(email: str, password: str) -> User:
        if not email or not password:
            raise AuthenticationError("Invalid email or password")

        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user or not user.check_password(password):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is not active")

        user.last_active = now_local()
        db.session.commit()
        log.info("User %s signed in", user.id)
        return user

    @staticmethod
    def touch_last_active(user: User, *, now: Optional[datetime] = None) -> bool:
        now = now or now_local()
        if user.last_active and now - user.last_active <= timedelta(seconds=LAST_ACTIVE_REFRESH_SECONDS):
            return False
        user.last_active = now
        db.session.commit()
        return True


class UserService:
    """Use case: manage accounts and profiles."""

    @staticmethod
    def _email(value) -> str:
        email = require_non_empty(value, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is invalid")
        return email

    @staticmethod
    def _ensure_email_free(email: str, exclude_id: Optional[int] = None) -> None:
        existing = User.query.filter_by(email=email).first()
        if existing and existing.id != exclude_id:
            raise ValidationError("Email already exists")

    @staticmethod
    def create_account(
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str = "",
        role: Role = Role.STAFF,
        department: Optional[str] = None,
        position: Optional[str] = None,
        phone: Optional[str] = None,
        must_change_password: bool = True,
    ) -> User:
        email = UserService._email(email)
        first_name = require_non_empty(first_name, "First name")
        validate_password(password)
        UserService._ensure_email_free(email)

        user = User(
            email=email,
            first_name=first_name,
            last_name=(last_name or "").strip(),
            role=role.value,
            status=UserStatus.ACTIVE.value,
            department=department,
            position=position,
            phone=phone,
            must_change_password=must_change_password,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        log.info("Created %s account %s", user.role, user.id)
        return user

    @staticmethod
    def register(*, actor: User, data: dict) -> User:
        """Admin-only self-service registration: always creates STAFF."""
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        return UserService.create_account(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("firstName"),
            last_name=data.get("lastName") or "",
            role=Role.STAFF,
            department=data.get("department"),
            position=data.get("position"),
        )

    @staticmethod
    def create_user(*, actor: User, data: dict) -> User:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        role = Role(validate_enum(data.get("role"), "role", values_of(Role), default=Role.STAFF.value))
        if role in {Role.ADMIN, Role.SUPER_ADMIN} and not actor.is_super_admin:
            raise AuthorizationError("Only a Super Admin can create admins")
        return UserService.create_account(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("firstName"),
            last_name=data.get("lastName") or "",
            role=role,
            department=data.get("department"),
            position=data.get("position"),
            phone=data.get("phone"),
        )

    @staticmethod
    def list_directory() -> list[User]:
        return (
            User.query.filter_by(status=UserStatus.ACTIVE.value)
            .order_by(User.first_name.asc(), User.last_name.asc())
            .all()
        )

    @staticmethod
    def get(user_id: int) -> User:
        return get_or_404(User, user_id, "User not found")

    @staticmethod
    def update_user(*, actor: User, user_id: int, data: dict) -> User:
        if actor.id != user_id and not actor.is_admin:
            raise AuthorizationError("Forbidden")
        user = get_or_404(User, user_id, "User not found")

        if "role" in data and data["role"] != user.role:
            if user.is_super_admin:
                raise AuthorizationError("Cannot change role of a Super Admin")
        admin_only = {"role", "status", "email", "password"} & set(data)
        if admin_only and not actor.is_admin:
            raise AuthorizationError("Only admins can change role, status, email or password")

        for key, attr in PROFILE_FIELDS.items():
            if key in data:
                setattr(user, attr, validate_string(data[key], key, max_length=200) or None)
        if "firstName" in data:
            user.first_name = require_non_empty(data["firstName"], "First name")

        if "role" in data:
            role = Role(validate_enum(data["role"], "role", values_of(Role), required=True))
            if role in {Role.ADMIN, Role.SUPER_ADMIN} and not actor.is_super_admin:
                raise AuthorizationError("Only a Super Admin can grant admin roles")
            user.role = role.value
        if "status" in data:
            user.status = validate_enum(data["status"], "status", values_of(UserStatus), required=True)
        if "email" in data:
            email = UserService._email(data["email"])
            UserService._ensure_email_free(email, exclude_id=user.id)
            user.email = email
        if data.get("password"):
            user.set_password(validate_password(data["password"]))
            user.must_change_password = True

        db.session.commit()
        return user

    @staticmethod
    def delete_user(*, actor: User, user_id: int) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden")
        if actor.id == user_id:
            raise ValidationError("Cannot delete your own account")
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        if actor.role == Role.ADMIN.value and user.role != Role.STAFF.value:
            raise AuthorizationError("Admins can only delete Staff members")

        db.session.delete(user)
        db.session.commit()
        log.info("User %s deleted by %s", user_id, actor.id)

    @staticmethod
    def update_profile(*, user: User, data: dict) -> User:
        for key, attr in PROFILE_FIELDS.items():
            if key in data:
                setattr(user, attr, validate_string(data[key], key, max_length=200) or None)
        if "firstName" in data:
            user.first_name = require_non_empty(data["firstName"], "First name")

        new_password = data.get("newPassword")
        if new_password:
            if data.get("isForceChange"):
                if not user.must_change_password:
                    raise ValidationError("Password change not required")
            elif not user.check_password(data.get("currentPassword") or ""):
                raise ValidationError("Incorrect current password")
            user.set_password(validate_password(new_password))
            user.must_change_password = False

        db.session.commit()
        return user
