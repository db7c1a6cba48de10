"""
Pytest configuration and fixtures.

The app is configured through the environment before it is imported: a
file-backed SQLite database and a temporary local blob directory. The Redis
session store is replaced by an in-memory client.
"""
import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="room-chat-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["S3_BUCKET_NAME"] = ""
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.crud import user_crud
from app.service.auth_service import session_payload
from app.service.membership import MembershipService
from app.session import create_session, set_redis_client
import app.model  # noqa: F401
from main import app as api


class InMemoryRedis:
    """The subset of the redis client the session layer uses."""

    def __init__(self):
        self.store = {}

    def setex(self, key, ttl, value):
        self.store[key] = value
        return True

    def get(self, key):
        return self.store.get(key)

    def expire(self, key, ttl):
        return key in self.store

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


@pytest.fixture(autouse=True)
def session_store():
    store = InMemoryRedis()
    set_redis_client(store, session_ttl=3600)
    yield store
    set_redis_client(None)


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    api.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(api) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(name: str, email: str = None):
        return user_crud.create_from_dict(db, obj_in={
            "email": email or f"{name.lower()}@example.com",
            "name": name,
            "cognito_username": str(uuid.uuid4()),
        })
    return _make


@pytest.fixture
def make_room(db):
    def _make(owner, name: str = "general", members=()):
        membership = MembershipService(db)
        room = membership.create_room(owner.id, name)
        for user in members:
            membership.join(user.id, room.id)
        return room
    return _make


@pytest.fixture
def login():
    """Create a session for a user; returns (token, headers)."""
    def _login(user):
        token = f"token-{user.id}"
        create_session(token, session_payload(user))
        return token, {"Authorization": f"Bearer {token}"}
    return _login
