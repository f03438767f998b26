from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest

from opsdesk import create_app
from opsdesk.ai.client import EXTENSION_KEY
from opsdesk.core.enums import Role
from opsdesk.core.exceptions import ProviderError
from opsdesk.extensions import db
from opsdesk.models.user import User

PASSWORD = "Password1"


class FakeChatClient:
    """Stands in for ChatClient; replies are served in order."""

    def __init__(self, replies=None, *, available: bool = True, error: Optional[str] = None):
        self.replies = list(replies or [])
        self.available = available
        self.error = error
        self.calls: list[dict] = []

    def complete(self, *, system, prompt, max_tokens=None, temperature=None):
        self.calls.append({"system": system, "prompt": prompt, "max_tokens": max_tokens})
        if self.error:
            raise ProviderError(self.error)
        return self.replies.pop(0)


@pytest.fixture
def app():
    app = create_app("config.testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role: Role = Role.STAFF, *, first_name: str = "Sam", last_name: str = "Lee", **kwargs) -> User:
        counter["n"] += 1
        user = User(
            email=kwargs.pop("email", f"user{counter['n']}@opsdesk.test"),
            first_name=first_name,
            last_name=last_name,
            role=role.value,
            **kwargs,
        )
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def staff(make_user):
    return make_user(Role.STAFF, first_name="Sita", last_name="Rai")


@pytest.fixture
def manager(make_user):
    return make_user(Role.MANAGER, first_name="Maya", last_name="Shah")


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, first_name="Arun", last_name="KC")


@pytest.fixture
def super_admin(make_user):
    return make_user(Role.SUPER_ADMIN, first_name="Gita", last_name="Thapa")


@pytest.fixture
def login(client):
    def _login(user: User):
        resp = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def fake_chat(app):
    def _install(replies=None, **kwargs) -> FakeChatClient:
        fake = FakeChatClient(replies, **kwargs)
        app.extensions[EXTENSION_KEY] = fake
        return fake

    return _install
