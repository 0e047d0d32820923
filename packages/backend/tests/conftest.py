"""Test fixtures — an app wired to an in-memory user store.

Learn: create_app(user_store=...) installs the Authenticator directly,
so the HTTP tests never need a database. SQL store tests build their
own throwaway SQLite database (see test_sql_store.py).

bcrypt runs with 4 rounds here; production uses 12.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from authgate.auth.store import MemoryUserStore
from authgate.config import Settings
from authgate.main import create_app

TEST_SECRET = "test-secret-do-not-use-outside-the-test-suite"
USER_EMAIL = "a@x.com"
USER_PASSWORD = "correct-password"


def make_settings(**overrides) -> Settings:
    values = {
        "auth_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
        "environment": "development",
        "token_scheme": "",
    }
    values.update(overrides)
    return Settings(**values)


def make_request(headers=None, body: bytes = b"", query: str = "") -> Request:
    """Build a bare Starlette request for strategy-level tests."""
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1"))
            for k, v in (headers or {}).items()
        ],
        "query_string": query.encode(),
    }

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


class FailingStore:
    """A store whose every lookup fails, like a database that is down."""

    def __init__(self, exc: Exception | None = None):
        self.exc = exc or ConnectionError("user store unavailable")

    async def find_by_email(self, email):
        raise self.exc

    async def find_by_id(self, user_id):
        raise self.exc

    async def create(self, email, password):
        raise self.exc


@pytest.fixture()
def settings():
    return make_settings()


@pytest.fixture()
def store():
    return MemoryUserStore(bcrypt_rounds=4)


@pytest_asyncio.fixture()
async def user(store):
    """User A: a@x.com / correct-password."""
    return await store.create(USER_EMAIL, USER_PASSWORD)


@pytest_asyncio.fixture()
async def client(settings, store):
    """HTTP client for an app backed by the in-memory store."""
    app = create_app(settings=settings, user_store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def failing_client(settings):
    """HTTP client for an app whose user store always raises."""
    app = create_app(settings=settings, user_store=FailingStore())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
