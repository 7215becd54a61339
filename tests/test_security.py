"""Tests for password hashing and session tokens."""
from datetime import datetime, timedelta, UTC
from uuid import uuid4

import pytest
from jose import jwt

from tradelog.auth.security import PasswordHasher, SessionTokenCodec
from tradelog.exceptions import InvalidTokenError

SECRET = "unit-test-secret"


@pytest.fixture(scope="module")
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec():
    return SessionTokenCodec(SECRET)


def test_hash_and_verify(hasher):
    hashed = hasher.hash("secret123")

    assert hashed != "secret123"
    assert hashed.startswith("$2b$04$")
    assert hasher.verify("secret123", hashed)
    assert not hasher.verify("secret124", hashed)


def test_hash_is_salted(hasher):
    assert hasher.hash("secret123") != hasher.hash("secret123")


def test_default_cost_factor_is_ten():
    hashed = PasswordHasher().hash("secret123")
    assert hashed.startswith("$2b$10$")


@pytest.mark.parametrize("bad_hash", ["", None, "not-a-hash", "$2b$04$short", "plaintext$$$"])
def test_malformed_hash_fails_verification(hasher, bad_hash):
    assert hasher.verify("secret123", bad_hash) is False


@pytest.mark.asyncio
async def test_async_wrappers(hasher):
    hashed = await hasher.hash_async("secret123")
    assert await hasher.verify_async("secret123", hashed)
    assert not await hasher.verify_async("nope", hashed)


def test_issue_and_verify(codec):
    user_id = uuid4()
    token = codec.issue(user_id, "trader@example.com")

    claims = codec.verify(token)
    assert claims.subject == str(user_id)
    assert claims.email == "trader@example.com"


def test_token_expires_seven_days_after_issue(codec):
    issued_at = datetime(2024, 1, 1, tzinfo=UTC)
    token = codec.issue("user-1", "a@b.c", issued_at=issued_at)

    payload = jwt.get_unverified_claims(token)
    assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60


def test_token_accepted_six_days_after_issue(codec):
    token = codec.issue("user-1", "a@b.c", issued_at=datetime.now(UTC) - timedelta(days=6))
    assert codec.verify(token).subject == "user-1"


def test_token_rejected_eight_days_after_issue(codec):
    token = codec.issue("user-1", "a@b.c", issued_at=datetime.now(UTC) - timedelta(days=8))
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_token_signed_with_other_secret_is_rejected(codec):
    token = SessionTokenCodec("another-secret").issue("user-1", "a@b.c")
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_tampered_token_is_rejected(codec):
    header, payload, signature = codec.issue("user-1", "a@b.c").split(".")
    forged = jwt.encode({"sub": "user-2", "email": "x@y.z"}, "guess", algorithm="HS256").split(".")[1]
    with pytest.raises(InvalidTokenError):
        codec.verify(".".join([header, forged, signature]))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", None])
def test_malformed_token_is_rejected(codec, token):
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_token_without_subject_is_rejected(codec):
    exp = datetime.now(UTC) + timedelta(days=1)
    token = jwt.encode({"email": "a@b.c", "exp": exp}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_token_without_expiry_is_rejected(codec):
    token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        SessionTokenCodec("")
