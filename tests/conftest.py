"""Shared fixtures: an in-memory user store and small user factories."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import admin_panel.models  # noqa: F401  (registers tables on the metadata)
from admin_panel.services.auth import hash_password
from admin_panel.services.session_token import SessionTokenCodec
from admin_panel.services.user_store import SqlUserStatusStore

PASSWORD = "correct-horse"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> SqlUserStatusStore:
    return SqlUserStatusStore(engine)


@pytest.fixture
def codec() -> SessionTokenCodec:
    return SessionTokenCodec(secret="test-secret", expire_minutes=60)


@pytest.fixture(scope="session")
def password_hash() -> str:
    return hash_password(PASSWORD)


@pytest.fixture
def make_user(store, password_hash):
    def _make(username: str = "alice01", is_2fa_enabled: bool = True, **state):
        user = store.create_user(username, password_hash, is_2fa_enabled=is_2fa_enabled)
        if state:
            store._update(user.id, **state)
        return next(u for u in store.list_users() if u.id == user.id)

    return _make
