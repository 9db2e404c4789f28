"""Tests unitaires : hachage des mots de passe, émission et décodage des tokens."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from starlette.requests import Request

from objectifs.core.errors import AppHTTPException
from objectifs.core.security import (
    create_access_token,
    decode_token,
    extract_bearer,
    hash_password,
    verify_password,
)
from objectifs.core.settings import settings


def _request(authorization: str | None) -> Request:
    headers = [] if authorization is None else [(b"authorization", authorization.encode())]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _encode(claims: dict) -> str:
    claims = {"exp": datetime.now(timezone.utc) + timedelta(minutes=5), **claims}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_with_corrupted_hash_is_false():
    assert verify_password("secret123", "not-a-known-hash") is False


def test_token_carries_canonical_identity():
    token = create_access_token(42, "alice", "CONSULTANT")
    identity = decode_token(token)
    assert identity.id == 42
    assert identity.username == "alice"
    assert identity.role == "CONSULTANT"


@pytest.mark.parametrize("claim", ["userid", "userId", "sub"])
def test_decode_normalizes_legacy_id_claims(claim):
    token = _encode({claim: "7", "username": "bob", "role": "BUM"})
    assert decode_token(token).id == 7


def test_expired_token_is_invalid_credential():
    token = create_access_token(1, "alice", "CONSULTANT", expires_min=-1)
    with pytest.raises(AppHTTPException) as exc:
        decode_token(token)
    assert exc.value.status_code == 401
    assert exc.value.code == "INVALID_CREDENTIAL"


def test_bad_signature_is_invalid_credential():
    token = jwt.encode(
        {"id": 1, "role": "ADMIN", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "another-secret-0123456789abcdef0123456789",
        algorithm="HS256",
    )
    with pytest.raises(AppHTTPException) as exc:
        decode_token(token)
    assert exc.value.code == "INVALID_CREDENTIAL"


def test_token_without_id_or_role_is_rejected():
    with pytest.raises(AppHTTPException):
        decode_token(_encode({"username": "ghost", "role": "ADMIN"}))
    with pytest.raises(AppHTTPException):
        decode_token(_encode({"id": 3, "username": "ghost"}))


def test_extract_bearer():
    assert extract_bearer(_request("Bearer abc.def")) == "abc.def"
    assert extract_bearer(_request("bearer abc.def")) == "abc.def"


@pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "Bearer", "Token abc"])
def test_extract_bearer_rejects_missing_or_malformed(header):
    with pytest.raises(AppHTTPException) as exc:
        extract_bearer(_request(header))
    assert exc.value.status_code == 401
    assert exc.value.code == "UNAUTHENTICATED"
