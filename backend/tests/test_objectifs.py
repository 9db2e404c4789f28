"""Tests API : objectifs (listes, création, mise à jour, validation, suppression)."""

from __future__ import annotations

from datetime import datetime


def _create(api, token, **payload):
    payload.setdefault("description", "Pass exam")
    r = api.post("/objectifs", payload, token=token)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_applies_defaults(api, world):
    obj = _create(api, world.alice)
    assert obj["status"] == "En cours"
    assert obj["validatedbyadmin"] is False
    assert obj["annee"] == datetime.now().year
    assert obj["userid"] == world.alice_id
    assert obj["categorieId"] is None


def test_create_requires_description(api, world):
    r = api.post("/objectifs", {"description": "   "}, token=world.alice)
    assert r.status_code == 400
    r = api.post("/objectifs", {}, token=world.alice)
    assert r.status_code == 400


def test_list_mine_is_isolated_and_defaults_to_current_year(api, world):
    year = datetime.now().year
    mine_now = _create(api, world.alice, description="A")
    _create(api, world.alice, description="B", annee=2020)
    _create(api, world.carol, description="C")
    _create(api, world.bob, description="D")

    r = api.get("/objectifs/mine", token=world.alice)
    assert [o["id"] for o in r.json()] == [mine_now["id"]]

    r = api.get("/objectifs/mine/2020", token=world.alice)
    assert [o["description"] for o in r.json()] == ["B"]
    assert all(o["userid"] == world.alice_id for o in r.json())

    r = api.get(f"/objectifs/mine/{year}", token=world.carol)
    assert [o["description"] for o in r.json()] == ["C"]


def test_list_mine_rejects_out_of_range_year(api, world):
    _create(api, world.alice, description="A")

    r = api.get("/objectifs/mine/0", token=world.alice)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_list_all_scoping(api, world):
    _create(api, world.alice, description="A", annee=2024)
    _create(api, world.alice, description="A2", annee=2025)
    _create(api, world.carol, description="C", annee=2025)

    admin_all = api.get("/objectifs/all", token=world.admin).json()
    assert {o["description"] for o in admin_all} == {"A", "A2", "C"}

    bob_all = api.get("/objectifs/all", token=world.bob).json()
    assert {o["description"] for o in bob_all} == {"A", "A2"}

    bob_2025 = api.get("/objectifs/all", params={"annee": 2025}, token=world.bob).json()
    assert [o["description"] for o in bob_2025] == ["A2"]

    assert api.get("/objectifs/all", token=world.alice).status_code == 403


def test_get_objectif_visibility(api, world):
    obj = _create(api, world.alice)
    assert api.get(f"/objectifs/{obj['id']}", token=world.alice).status_code == 200
    assert api.get(f"/objectifs/{obj['id']}", token=world.bob).status_code == 200
    assert api.get(f"/objectifs/{obj['id']}", token=world.admin).status_code == 200
    assert api.get(f"/objectifs/{obj['id']}", token=world.bob2).status_code == 403
    assert api.get(f"/objectifs/{obj['id']}", token=world.carol).status_code == 403
    assert api.get("/objectifs/9999", token=world.admin).status_code == 404

    detail = api.get(f"/objectifs/{obj['id']}", token=world.alice).json()
    assert detail["commentaires"] == []
    assert detail["user"]["username"] == "alice"


def test_category_must_be_usable(api, world):
    glob = api.post("/categories", {"nom": "Certification", "isGlobal": True}, token=world.admin).json()
    carol_cat = api.post("/categories", {"nom": "Carol only"}, token=world.carol).json()
    alice_cat = api.post("/categories", {"nom": "Alice only"}, token=world.alice).json()

    assert _create(api, world.alice, categorieId=glob["id"])["categorie"]["nom"] == "Certification"
    assert _create(api, world.alice, categorieId=alice_cat["id"])["categorieId"] == alice_cat["id"]

    r = api.post("/objectifs", {"description": "X", "categorieId": carol_cat["id"]}, token=world.alice)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden: category not usable"

    r = api.post("/objectifs", {"description": "X", "categorieId": 9999}, token=world.alice)
    assert r.status_code == 404


def test_create_for_user(api, world):
    r = api.post("/objectifs/admin", {"description": "Lead a workshop", "userId": world.alice_id}, token=world.bob)
    assert r.status_code == 201
    assert r.json()["userid"] == world.alice_id

    r = api.post("/objectifs/admin", {"description": "X", "userId": world.alice_id}, token=world.bob2)
    assert r.status_code == 403

    r = api.post("/objectifs/admin", {"description": "X", "userId": 9999}, token=world.bob)
    assert r.status_code == 404

    r = api.post("/objectifs/admin", {"description": "X", "userid": world.carol_id}, token=world.admin)
    assert r.status_code == 201

    r = api.post("/objectifs/admin", {"description": "X", "userId": world.carol_id}, token=world.alice)
    assert r.status_code == 403


def test_batch_create_is_all_or_nothing_on_authorization(api, world):
    r = api.post(
        "/objectifs/admin/batch",
        {"description": "Team goal", "userIds": [world.alice_id, world.carol_id]},
        token=world.bob,
    )
    assert r.status_code == 403
    assert api.get("/objectifs/all", token=world.admin).json() == []

    r = api.post(
        "/objectifs/admin/batch",
        {"description": "Team goal", "userIds": [world.alice_id, 9999]},
        token=world.bob,
    )
    assert r.status_code == 404
    assert r.json()["details"] == {"userIds": [9999]}
    assert api.get("/objectifs/all", token=world.admin).json() == []


def test_batch_create(api, world):
    r = api.post(
        "/objectifs/admin/batch",
        {"description": "Team goal", "annee": 2025, "userIds": [world.alice_id, world.carol_id, world.alice_id]},
        token=world.admin,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["failed"] == []
    assert sorted(o["userid"] for o in body["created"]) == sorted([world.alice_id, world.carol_id])
    assert all(o["annee"] == 2025 for o in body["created"])


def test_update_by_owner(api, world):
    obj = _create(api, world.alice)
    r = api.put(f"/objectifs/{obj['id']}", {"description": "Pass exam with honors", "status": "Validé"}, token=world.alice)
    assert r.status_code == 200
    assert r.json()["description"] == "Pass exam with honors"
    assert r.json()["status"] == "Validé"
    assert r.json()["validatedbyadmin"] is False


def test_consultant_cannot_validate(api, world):
    obj = _create(api, world.alice)
    r = api.patch(f"/objectifs/{obj['id']}", {"validatedbyadmin": True, "description": "Changed"}, token=world.alice)
    assert r.status_code == 403

    after = api.get(f"/objectifs/{obj['id']}", token=world.alice).json()
    assert after["validatedbyadmin"] is False
    assert after["description"] == "Pass exam"


def test_admin_and_own_bum_can_validate(api, world):
    obj = _create(api, world.alice)
    r = api.patch(f"/objectifs/{obj['id']}", {"validatedbyadmin": True}, token=world.bob)
    assert r.status_code == 200
    assert r.json()["validatedbyadmin"] is True

    r = api.patch(f"/objectifs/{obj['id']}", {"validatedbyadmin": False}, token=world.admin)
    assert r.json()["validatedbyadmin"] is False


def test_foreign_bum_is_forbidden_on_every_mutation(api, world):
    obj = _create(api, world.alice)
    oid = obj["id"]

    responses = [
        api.put(f"/objectifs/{oid}", {"description": "hijack"}, token=world.bob2),
        api.patch(f"/objectifs/{oid}", {"validatedbyadmin": True}, token=world.bob2),
        api.delete(f"/objectifs/{oid}", token=world.bob2),
        api.post("/objectifs/admin", {"description": "X", "userId": world.alice_id}, token=world.bob2),
        api.post(f"/objectifs/{oid}/commentaires", {"contenu": "hi"}, token=world.bob2),
        api.patch(f"/bum/objectifs/{oid}", {"validatedbyadmin": True}, token=world.bob2),
        api.delete(f"/users/{world.alice_id}", token=world.bob2),
        api.post("/categories", {"nom": "X", "consultantId": world.alice_id}, token=world.bob2),
    ]
    assert [r.status_code for r in responses] == [403] * len(responses)

    after = api.get(f"/objectifs/{oid}", token=world.alice).json()
    assert after["description"] == "Pass exam"
    assert after["validatedbyadmin"] is False


def test_update_category_and_detach(api, world):
    glob = api.post("/categories", {"nom": "Formation", "isGlobal": True}, token=world.admin).json()
    obj = _create(api, world.alice)

    r = api.patch(f"/objectifs/{obj['id']}", {"categorieId": glob["id"]}, token=world.alice)
    assert r.json()["categorieId"] == glob["id"]

    r = api.patch(f"/objectifs/{obj['id']}", {"categorieId": None}, token=world.alice)
    assert r.json()["categorieId"] is None


def test_update_unknown_objectif(api, world):
    assert api.put("/objectifs/9999", {"description": "x"}, token=world.admin).status_code == 404


def test_remove(api, world):
    obj = _create(api, world.alice)
    api.post(f"/objectifs/{obj['id']}/commentaires", {"contenu": "hello"}, token=world.alice)

    assert api.delete(f"/objectifs/{obj['id']}", token=world.alice).status_code == 403

    r = api.delete(f"/objectifs/{obj['id']}", token=world.bob)
    assert r.status_code == 200
    assert api.get(f"/objectifs/{obj['id']}", token=world.admin).status_code == 404
    assert api.delete(f"/objectifs/{obj['id']}", token=world.admin).status_code == 404


def test_end_to_end_validation_by_own_bum(api, notifier):
    # ADMIN crée une BU et le BUM bob
    api.register("root", role="ADMIN")
    admin = api.login("root")
    bu = api.post("/business-units", {"nom": "Data"}, token=admin).json()
    bob = api.post(
        "/users",
        {"username": "bob", "password": "secret123", "role": "BUM", "businessUnitId": bu["id"]},
        token=admin,
    )
    assert bob.status_code == 201
    bob_token = api.login("bob")

    # bob crée alice
    alice = api.post("/bum/consultants", {"username": "alice", "password": "secret123"}, token=bob_token)
    assert alice.status_code == 201
    assert alice.json()["bumId"] == bob.json()["id"]

    # alice crée son objectif 2025
    alice_token = api.login("alice")
    obj = api.post("/objectifs", {"description": "Pass exam", "annee": 2025}, token=alice_token)
    assert obj.status_code == 201

    # bob valide
    r = api.patch(f"/objectifs/{obj.json()['id']}", {"validatedbyadmin": True}, token=bob_token)
    assert r.status_code == 200

    mine = api.get("/objectifs/mine/2025", token=alice_token).json()
    assert len(mine) == 1
    assert mine[0]["validatedbyadmin"] is True
    assert mine[0]["status"] == "En cours"


def test_end_to_end_foreign_bum_cannot_delete(api, world):
    obj = _create(api, world.alice, annee=2025)

    r = api.delete(f"/objectifs/{obj['id']}", token=world.bob2)
    assert r.status_code == 403

    mine = api.get("/objectifs/mine/2025", token=world.alice).json()
    assert [o["id"] for o in mine] == [obj["id"]]
