"""Tests API : gestion des comptes (ADMIN) et équipe (BUM)."""

from __future__ import annotations

import os

from sqlalchemy import create_engine, func, select

from objectifs.models import Categorie, Commentaire, Objectif


def _count(model, **filters) -> int:
    engine = create_engine(os.environ["DATABASE_URL_SYNC"])
    try:
        with engine.connect() as conn:
            stmt = select(func.count()).select_from(model)
            for name, value in filters.items():
                stmt = stmt.where(getattr(model, name) == value)
            return conn.execute(stmt).scalar_one()
    finally:
        engine.dispose()


def test_list_users_is_admin_only(api, world):
    r = api.get("/users", token=world.admin)
    assert r.status_code == 200
    usernames = {u["username"] for u in r.json()}
    assert usernames == {"admin", "bob", "bob2", "alice", "carol"}
    assert all("password" not in u for u in r.json())

    alice = next(u for u in r.json() if u["username"] == "alice")
    assert alice["businessUnit"]["nom"] == "Data"
    assert alice["bumId"] == world.bob_id

    assert api.get("/users", token=world.bob).status_code == 403
    assert api.get("/users", token=world.alice).status_code == 403


def test_my_team(api, world):
    r = api.get("/users/my-team", token=world.bob)
    assert [u["username"] for u in r.json()] == ["alice"]

    r = api.get("/users/my-team", token=world.admin)
    assert [u["username"] for u in r.json()] == ["alice", "carol"]

    assert api.get("/users/my-team", token=world.alice).status_code == 403


def test_get_user_visibility(api, world):
    assert api.get(f"/users/{world.alice_id}", token=world.alice).status_code == 200
    assert api.get(f"/users/{world.alice_id}", token=world.bob).status_code == 200
    assert api.get(f"/users/{world.alice_id}", token=world.admin).status_code == 200

    r = api.get(f"/users/{world.alice_id}", token=world.bob2)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden: not your consultant"

    assert api.get(f"/users/{world.alice_id}", token=world.carol).status_code == 403
    assert api.get("/users/9999", token=world.admin).status_code == 404


def test_admin_creates_consultant_and_welcome_email_is_sent(api, world, notifier):
    before = len(notifier.sent)
    r = api.post(
        "/users",
        {
            "username": "dave",
            "password": "secret123",
            "email": "dave@example.com",
            "businessUnitId": world.data_bu["id"],
            "bumId": world.bob_id,
        },
        token=world.admin,
    )
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "CONSULTANT"
    assert notifier.sent[before:] == [("dave@example.com", "dave", "secret123")]


def test_create_user_validates_links(api, world):
    r = api.post("/users", {"username": "eve", "password": "secret123", "bumId": world.alice_id}, token=world.admin)
    assert r.status_code == 400

    r = api.post("/users", {"username": "eve", "password": "secret123", "businessUnitId": 999}, token=world.admin)
    assert r.status_code == 404

    r = api.post("/users", {"username": "alice", "password": "secret123"}, token=world.admin)
    assert r.status_code == 400
    assert r.json()["error"] == "conflict: username taken"

    r = api.post("/users", {"username": "eve", "password": "secret123"}, token=world.bob)
    assert r.status_code == 403


def test_update_user(api, world):
    r = api.put(
        f"/users/{world.carol_id}",
        {"bumId": world.bob_id, "businessUnitId": world.data_bu["id"], "password": "newpass99"},
        token=world.admin,
    )
    assert r.status_code == 200, r.text
    assert r.json()["bumId"] == world.bob_id
    assert r.json()["businessUnit"]["nom"] == "Data"

    # Le nouveau mot de passe est actif, l’ancien non
    assert api.client.post("/auth/login", json={"username": "carol", "password": "newpass99"}).status_code == 200
    assert api.client.post("/auth/login", json={"username": "carol", "password": "secret123"}).status_code == 401

    team = api.get("/users/my-team", token=world.bob).json()
    assert {u["username"] for u in team} == {"alice", "carol"}


def test_update_user_is_admin_only(api, world):
    r = api.put(f"/users/{world.alice_id}", {"role": "ADMIN"}, token=world.bob)
    assert r.status_code == 403


def test_admin_cannot_delete_self(api, world):
    r = api.delete(f"/users/{world.admin_id}", token=world.admin)
    assert r.status_code == 400


def test_bum_delete_rules(api, world):
    r = api.delete(f"/users/{world.carol_id}", token=world.bob)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden: not yours"

    # Un BUM rattaché à bob n’est pas un consultant
    sub = api.post(
        "/users",
        {"username": "subbum", "password": "secret123", "role": "BUM", "bumId": world.bob_id},
        token=world.admin,
    ).json()
    r = api.delete(f"/users/{sub['id']}", token=world.bob)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden: not a consultant"

    assert api.delete("/users/9999", token=world.bob).status_code == 404
    assert api.delete(f"/users/{world.bob_id}", token=world.alice).status_code == 403


def test_delete_user_cascades(api, world):
    obj = api.post("/objectifs", {"description": "Pass exam", "annee": 2025}, token=world.alice).json()
    api.post(f"/objectifs/{obj['id']}/commentaires", {"contenu": "Je commence"}, token=world.alice)
    api.post(f"/objectifs/{obj['id']}/commentaires", {"contenu": "Courage"}, token=world.bob)
    api.post("/categories", {"nom": "Perso"}, token=world.alice)
    carol_obj = api.post("/objectifs", {"description": "Learn Go"}, token=world.carol).json()

    r = api.delete(f"/users/{world.alice_id}", token=world.bob)
    assert r.status_code == 200

    all_objs = api.get("/objectifs/all", token=world.admin).json()
    assert all(o["userid"] != world.alice_id for o in all_objs)
    assert [o["id"] for o in all_objs] == [carol_obj["id"]]

    assert _count(Objectif, user_id=world.alice_id) == 0
    assert _count(Commentaire, user_id=world.alice_id) == 0
    assert _count(Commentaire, objectif_id=obj["id"]) == 0
    assert _count(Categorie, user_id=world.alice_id) == 0
    assert api.get(f"/users/{world.alice_id}", token=world.admin).status_code == 404


def test_deleting_a_bum_detaches_its_consultants(api, world):
    r = api.delete(f"/users/{world.bob_id}", token=world.admin)
    assert r.status_code == 200

    alice = api.get(f"/users/{world.alice_id}", token=world.admin).json()
    assert alice["bumId"] is None
    assert alice["businessUnitId"] == world.data_bu["id"]


def test_demoting_a_bum_detaches_its_consultants(api, world):
    r = api.put(f"/users/{world.bob_id}", {"role": "CONSULTANT"}, token=world.admin)
    assert r.status_code == 200
    assert r.json()["role"] == "CONSULTANT"

    alice = api.get(f"/users/{world.alice_id}", token=world.admin).json()
    assert alice["bumId"] is None

    # Les consultants d’un autre BUM ne bougent pas
    carol = api.get(f"/users/{world.carol_id}", token=world.admin).json()
    assert carol["bumId"] == world.bob2_id

    assert api.get("/bum/consultants", token=world.bob).status_code == 403


def test_role_update_keeping_bum_keeps_team(api, world):
    r = api.put(f"/users/{world.bob_id}", {"role": "BUM", "email": "bob@example.com"}, token=world.admin)
    assert r.status_code == 200

    alice = api.get(f"/users/{world.alice_id}", token=world.admin).json()
    assert alice["bumId"] == world.bob_id
