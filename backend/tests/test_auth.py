"""Tests API : inscription, connexion, profil courant, format d’erreur."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from objectifs.core import rate_limit
from objectifs.core.errors import AppHTTPException
from objectifs.core.rate_limit import LoginRateLimiter
from objectifs.core.security import create_access_token
from objectifs.core.settings import settings


def test_first_account_can_bootstrap_admin(api):
    r = api.register("root", role="ADMIN")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["role"] == "ADMIN"
    assert "password" not in body


def test_register_defaults_to_consultant(api):
    api.register("root", role="ADMIN")
    r = api.register("dave")
    assert r.status_code == 201
    assert r.json()["role"] == "CONSULTANT"


def test_register_duplicate_username_is_conflict(api):
    api.register("dave")
    r = api.register("dave")
    assert r.status_code == 400
    assert r.json()["error"] == "conflict: username taken"
    assert r.json()["code"] == "CONFLICT"


def test_elevated_role_requires_admin_once_users_exist(api):
    api.register("root", role="ADMIN")

    r = api.register("mallory", role="ADMIN")
    assert r.status_code == 403

    admin = api.login("root")
    r = api.register("bum", role="BUM", token=admin)
    assert r.status_code == 201
    assert r.json()["role"] == "BUM"


def test_register_rejects_short_password(api):
    r = api.register("dave", password="abc")
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_login_returns_token_and_user(api):
    api.register("dave")
    r = api.client.post("/auth/login", json={"username": "dave", "password": "secret123"})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["username"] == "dave"
    assert "password" not in body["user"]


def test_login_with_wrong_password(api):
    api.register("dave")
    r = api.client.post("/auth/login", json={"username": "dave", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["error"] == "invalid credentials"


def test_login_unknown_user(api):
    r = api.client.post("/auth/login", json={"username": "ghost", "password": "secret123"})
    assert r.status_code == 401


def test_me(api):
    api.register("dave", email="dave@example.com")
    token = api.login("dave")
    r = api.get("/auth/me", token=token)
    assert r.status_code == 200
    assert r.json()["username"] == "dave"
    assert r.json()["email"] == "dave@example.com"


def test_missing_and_invalid_bearer(api):
    r = api.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHENTICATED"

    r = api.get("/auth/me", token="garbage")
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_CREDENTIAL"


def test_token_of_deleted_user_is_rejected(api):
    token = create_access_token(999, "ghost", "ADMIN")
    r = api.get("/objectifs/mine", token=token)
    assert r.status_code == 401


def test_role_is_read_from_database_not_token(api):
    r = api.register("dave")
    forged = create_access_token(r.json()["id"], "dave", "ADMIN")
    assert api.get("/users", token=forged).status_code == 403


def test_validation_error_shape(api):
    r = api.client.post("/auth/login", json={"username": "dave"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"].startswith("invalid request")
    assert "request_id" in body
    assert isinstance(body["details"], list)


def test_unknown_fields_are_rejected(api):
    r = api.client.post("/auth/register", json={"username": "dave", "password": "secret123", "admin": True})
    assert r.status_code == 400


def test_request_id_is_echoed(api):
    r = api.client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-Id"] == "abc-123"

    r = api.client.get("/health")
    assert r.headers["X-Request-Id"]


def test_unknown_route_uses_error_format(api):
    r = api.client.get("/nope")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"
    assert "error" in r.json()


def test_login_rate_limit(api, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 2)
    api.register("dave")

    for _ in range(2):
        r = api.client.post("/auth/login", json={"username": "dave", "password": "nope"})
        assert r.status_code == 401

    r = api.client.post("/auth/login", json={"username": "dave", "password": "secret123"})
    assert r.status_code == 429
    assert r.json()["code"] == "RATE_LIMITED"


def test_rotating_usernames_does_not_bypass_limit(api, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 3)

    codes = [
        api.client.post("/auth/login", json={"username": f"user{i}", "password": "nope"}).status_code
        for i in range(5)
    ]
    assert codes == [401, 401, 401, 429, 429]


def _request(ip: str) -> SimpleNamespace:
    return SimpleNamespace(client=SimpleNamespace(host=ip))


def test_limiter_keeps_one_bucket_per_ip_and_drops_expired(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 5000)
    now = [1000.0]
    monkeypatch.setattr(rate_limit.time, "monotonic", lambda: now[0])

    limiter = LoginRateLimiter()
    for _ in range(1000):
        limiter.check(_request("1.2.3.4"))
    assert len(limiter) == 1

    limiter.check(_request("5.6.7.8"))
    assert len(limiter) == 2

    now[0] += 61
    limiter.check(_request("9.9.9.9"))
    assert len(limiter) == 1


def test_limiter_window_resets(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 1)
    now = [0.0]
    monkeypatch.setattr(rate_limit.time, "monotonic", lambda: now[0])

    limiter = LoginRateLimiter()
    limiter.check(_request("1.2.3.4"))
    with pytest.raises(AppHTTPException) as exc:
        limiter.check(_request("1.2.3.4"))
    assert exc.value.status_code == 429

    now[0] += 60
    limiter.check(_request("1.2.3.4"))


def test_health_and_status(api):
    assert api.client.get("/health").json()["status"] == "ok"

    api.register("dave")
    body = api.client.get("/system/status").json()
    assert body["ok"] is True
    assert body["counts"]["users"] == 1
    assert body["counts"]["objectifs"] == 0
