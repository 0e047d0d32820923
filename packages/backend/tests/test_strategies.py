"""Credential and token verifier tests.

Learn: Tests cover:
1. Local strategy: unknown email, right/wrong password, store failures
2. Local strategy extraction from JSON body and query string
3. JWT strategy: resolving, deleted and missing subjects, store failures
4. JWT strategy extraction: raw header, bad signature, expiry
"""

import json
import uuid

import pytest

from authgate.auth.jwt import create_access_token
from authgate.auth.result import AuthError, Success, Unauthenticated
from authgate.auth.strategies import Credentials, JwtStrategy, LocalStrategy
from authgate.config import JwtConfig

from conftest import TEST_SECRET, USER_EMAIL, USER_PASSWORD, FailingStore, make_request

CONFIG = JwtConfig(secret=TEST_SECRET)


# ═══════════════════════════════════════════════════════════
# Local strategy — verify
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_local_unknown_email_is_unauthenticated(store, user):
    strategy = LocalStrategy(store)
    for email in ["nobody@x.com", "A@X.COM", "", "a@x.com "]:
        result = await strategy.verify(Credentials(email=email, password=USER_PASSWORD))
        assert isinstance(result, Unauthenticated)


@pytest.mark.asyncio
async def test_local_correct_password_succeeds(store, user):
    result = await LocalStrategy(store).verify(Credentials(USER_EMAIL, USER_PASSWORD))
    assert isinstance(result, Success)
    assert result.user.id == user.id


@pytest.mark.asyncio
async def test_local_wrong_password_is_unauthenticated(store, user):
    result = await LocalStrategy(store).verify(Credentials(USER_EMAIL, "wrong"))
    assert isinstance(result, Unauthenticated)
    assert not result.ok


@pytest.mark.asyncio
async def test_local_store_failure_is_error():
    exc = ConnectionError("db down")
    result = await LocalStrategy(FailingStore(exc)).verify(Credentials(USER_EMAIL, "x"))
    assert isinstance(result, AuthError)
    assert result.cause is exc


@pytest.mark.asyncio
async def test_local_compare_failure_is_error(store, user, monkeypatch):
    """An exception from the password check is reported, not swallowed."""

    async def broken(candidate):
        raise RuntimeError("hasher crashed")

    monkeypatch.setattr(user, "compare_password", broken)
    result = await LocalStrategy(store).verify(Credentials(USER_EMAIL, USER_PASSWORD))
    assert isinstance(result, AuthError)
    assert isinstance(result.cause, RuntimeError)


# ═══════════════════════════════════════════════════════════
# Local strategy — extract
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_local_extract_from_json_body(store):
    body = json.dumps({"email": USER_EMAIL, "password": USER_PASSWORD}).encode()
    creds = await LocalStrategy(store).extract(make_request(body=body))
    assert creds == Credentials(USER_EMAIL, USER_PASSWORD)


@pytest.mark.asyncio
async def test_local_extract_from_query(store):
    creds = await LocalStrategy(store).extract(
        make_request(query="email=a%40x.com&password=secret")
    )
    assert creds == Credentials("a@x.com", "secret")


@pytest.mark.asyncio
async def test_local_extract_custom_field_names(store):
    strategy = LocalStrategy(store, username_field="username", password_field="pw")
    body = json.dumps({"username": "bob", "pw": "hunter22"}).encode()
    assert await strategy.extract(make_request(body=body)) == Credentials("bob", "hunter22")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b"[1, 2]",
        json.dumps({"email": USER_EMAIL}).encode(),
        json.dumps({"email": "", "password": "x"}).encode(),
        json.dumps({"email": USER_EMAIL, "password": 123}).encode(),
    ],
)
async def test_local_extract_missing_credentials(store, body):
    result = await LocalStrategy(store).extract(make_request(body=body))
    assert result == Unauthenticated("Missing credentials")


# ═══════════════════════════════════════════════════════════
# JWT strategy — verify
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_jwt_resolving_subject_succeeds(store, user):
    result = await JwtStrategy(store, CONFIG).verify({"sub": str(user.id)})
    assert isinstance(result, Success)
    assert result.user is user


@pytest.mark.asyncio
async def test_jwt_unknown_subject_is_unauthenticated(store, user):
    result = await JwtStrategy(store, CONFIG).verify({"sub": str(uuid.uuid4())})
    assert isinstance(result, Unauthenticated)


@pytest.mark.asyncio
async def test_jwt_deleted_user_is_unauthenticated(store, user):
    store.delete(user.id)
    result = await JwtStrategy(store, CONFIG).verify({"sub": str(user.id)})
    assert isinstance(result, Unauthenticated)


@pytest.mark.asyncio
async def test_jwt_payload_without_subject(store):
    result = await JwtStrategy(store, CONFIG).verify({"iat": 0})
    assert isinstance(result, Unauthenticated)


@pytest.mark.asyncio
async def test_jwt_store_failure_is_error():
    result = await JwtStrategy(FailingStore(), CONFIG).verify({"sub": str(uuid.uuid4())})
    assert isinstance(result, AuthError)
    assert isinstance(result.cause, ConnectionError)


# ═══════════════════════════════════════════════════════════
# JWT strategy — extract
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_jwt_extract_raw_header(store):
    token = create_access_token("u1", CONFIG)
    payload = await JwtStrategy(store, CONFIG).extract(
        make_request(headers={"Authorization": token})
    )
    assert payload["sub"] == "u1"


@pytest.mark.asyncio
async def test_jwt_extract_missing_header(store):
    result = await JwtStrategy(store, CONFIG).extract(make_request())
    assert result == Unauthenticated("No auth token")


@pytest.mark.asyncio
async def test_jwt_extract_wrong_secret(store):
    token = create_access_token("u1", JwtConfig(secret="someone-elses-secret-with-enough-length"))
    result = await JwtStrategy(store, CONFIG).extract(
        make_request(headers={"authorization": token})
    )
    assert isinstance(result, Unauthenticated)


@pytest.mark.asyncio
async def test_jwt_extract_expired(store):
    token = create_access_token("u1", CONFIG, expires_minutes=-1)
    result = await JwtStrategy(store, CONFIG).extract(
        make_request(headers={"authorization": token})
    )
    assert result == Unauthenticated("Token has expired")


@pytest.mark.asyncio
async def test_jwt_extract_bearer_scheme(store):
    config = JwtConfig(secret=TEST_SECRET, scheme="Bearer")
    token = create_access_token("u1", config)
    strategy = JwtStrategy(store, config)

    payload = await strategy.extract(make_request(headers={"authorization": f"Bearer {token}"}))
    assert payload["sub"] == "u1"

    raw = await strategy.extract(make_request(headers={"authorization": token}))
    assert isinstance(raw, Unauthenticated)


@pytest.mark.asyncio
async def test_local_blank_body_field_does_not_fall_back_to_query(store):
    body = json.dumps({"email": "", "password": "from-body"}).encode()
    result = await LocalStrategy(store).extract(make_request(body=body, query="email=a%40x.com"))
    assert result == Unauthenticated("Missing credentials")


@pytest.mark.asyncio
async def test_local_query_fills_only_fields_missing_from_body(store):
    body = json.dumps({"password": "from-body"}).encode()
    creds = await LocalStrategy(store).extract(
        make_request(body=body, query="email=a%40x.com&password=from-query")
    )
    assert creds == Credentials("a@x.com", "from-body")
