from __future__ import annotations

import logging
import os

from sqlalchemy import inspect

from .core.enums import Role
from .extensions import db
from .models.user import User

log = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin@opsdesk.local", "Super", "Admin", Role.SUPER_ADMIN, "Management", "Owner"),
    ("manager@opsdesk.local", "Mona", "Manager", Role.MANAGER, "Operations", "Operations Manager"),
    ("staff@opsdesk.local", "Sam", "Staff", Role.STAFF, "Operations", "Associate"),
)


def list_tables() -> list[str]:
    return inspect(db.engine).get_table_names()


def ensure_demo_users(password: str | None = None) -> list[User]:
    """Create the demo accounts that are missing. Existing accounts are left untouched."""
    password = password or os.getenv("SEED_PASSWORD", "ChangeMe123")
    created = []
    for email, first_name, last_name, role, department, position in DEMO_USERS:
        if User.query.filter_by(email=email).first() is not None:
            continue
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role.value,
            department=department,
            position=position,
            must_change_password=True,
        )
        user.set_password(password)
        db.session.add(user)
        created.append(user)

    db.session.commit()
    if created:
        log.info("Seeded %s demo users", len(created))
    return created
