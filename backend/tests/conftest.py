"""Configuration pytest.

- Base SQLite temporaire (aiosqlite pour l’API, pysqlite pour créer le schéma).
- Variables d’environnement posées AVANT l’import de l’application (settings lus à l’import).
- Tables vidées entre chaque test ; notifier remplacé par une doublure.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from types import SimpleNamespace

_DB_PATH = Path(tempfile.mkdtemp(prefix="objectifs-tests-")) / "test.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["DATABASE_URL_SYNC"] = f"sqlite:///{_DB_PATH}"
os.environ["ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdef0123456789abcdef"
os.environ["BREVO_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

import objectifs.models  # noqa: E402,F401
from objectifs.core.rate_limit import login_rate_limiter  # noqa: E402
from objectifs.db.base import Base  # noqa: E402
from objectifs.main import app  # noqa: E402
from objectifs.services.notification_service import get_notifier  # noqa: E402

from fakes import Api, RecordingNotifier  # noqa: E402

_sync_engine = create_engine(f"sqlite:///{_DB_PATH}")


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(_sync_engine)
    yield
    Base.metadata.drop_all(_sync_engine)
    _sync_engine.dispose()


@pytest.fixture(autouse=True)
def _clean_state():
    yield
    with _sync_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    login_rate_limiter.reset()
    app.dependency_overrides.clear()


@pytest.fixture
def notifier() -> RecordingNotifier:
    fake = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: fake
    return fake


@pytest.fixture
def client(notifier):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api(client) -> Api:
    return Api(client)


@pytest.fixture
def world(api: Api) -> SimpleNamespace:
    """
    Organisation de référence :
    - admin (ADMIN, premier compte)
    - BU "Data" : bob (BUM) -> alice (CONSULTANT)
    - BU "Cloud" : bob2 (BUM) -> carol (CONSULTANT)
    """
    r = api.register("admin", role="ADMIN")
    assert r.status_code == 201, r.text
    admin_id = r.json()["id"]
    admin = api.login("admin")

    data_bu = api.post("/business-units", {"nom": "Data"}, token=admin).json()
    cloud_bu = api.post("/business-units", {"nom": "Cloud"}, token=admin).json()

    bob = api.post(
        "/users",
        {"username": "bob", "password": "secret123", "role": "BUM", "businessUnitId": data_bu["id"]},
        token=admin,
    ).json()
    bob2 = api.post(
        "/users",
        {"username": "bob2", "password": "secret123", "role": "BUM", "businessUnitId": cloud_bu["id"]},
        token=admin,
    ).json()
    bob_token = api.login("bob")
    bob2_token = api.login("bob2")

    alice = api.post(
        "/bum/consultants",
        {"username": "alice", "password": "secret123", "email": "alice@example.com"},
        token=bob_token,
    ).json()
    carol = api.post(
        "/bum/consultants",
        {"username": "carol", "password": "secret123"},
        token=bob2_token,
    ).json()

    return SimpleNamespace(
        admin_id=admin_id,
        admin=admin,
        data_bu=data_bu,
        cloud_bu=cloud_bu,
        bob_id=bob["id"],
        bob=bob_token,
        bob2_id=bob2["id"],
        bob2=bob2_token,
        alice_id=alice["id"],
        alice=api.login("alice"),
        carol_id=carol["id"],
        carol=api.login("carol"),
    )
