import pytest

from neighbora.core.errors import Forbidden, Unauthenticated
from neighbora.core.security import AdminGate, ClaimsBackedSource, RecordBackedSource, build_admin_source
from neighbora.repositories import admins as admins_repo
from neighbora.schemas.principal import Principal

from conftest import FakeIdentity, bearer


def _principal(uid="u1"):
    return Principal(uid=uid, email=f"{uid}@example.com")


def test_no_principal_is_unauthenticated(db):
    with pytest.raises(Unauthenticated):
        AdminGate(RecordBackedSource(db)).authorize(None)


def test_no_record_is_forbidden(db):
    with pytest.raises(Forbidden) as exc:
        AdminGate(RecordBackedSource(db)).authorize(_principal())
    assert exc.value.message == "Access denied. Admin permissions required"


def test_active_record_sets_role(db):
    admins_repo.create(db, {"firebaseUid": "u1", "email": "u1@example.com", "role": "superadmin"}, None)
    elevated = AdminGate(RecordBackedSource(db)).authorize(_principal())
    assert elevated.role == "superadmin"
    assert elevated.uid == "u1"


def test_inactive_record_is_treated_as_absent(db):
    record = admins_repo.create(db, {"firebaseUid": "u1", "email": "u1@example.com"}, None)
    admins_repo.deactivate(db, str(record["_id"]), "someone")
    with pytest.raises(Forbidden):
        AdminGate(RecordBackedSource(db)).authorize(_principal())


def test_revocation_takes_effect_on_next_request(db):
    record = admins_repo.create(db, {"firebaseUid": "u1", "email": "u1@example.com"}, None)
    gate = AdminGate(RecordBackedSource(db))
    assert gate.authorize(_principal()).role == "admin"

    admins_repo.deactivate(db, str(record["_id"]), None)
    with pytest.raises(Forbidden):
        gate.authorize(_principal())


def test_claims_source():
    identity = FakeIdentity()
    identity.add_user("u1", "u1@example.com", claims={"admin": True})
    identity.add_user("u2", "u2@example.com", claims={"admin": True, "superadmin": True})
    identity.add_user("u3", "u3@example.com", claims={"admin": "yes"})
    gate = AdminGate(ClaimsBackedSource(identity))

    assert gate.authorize(_principal("u1")).role == "admin"
    assert gate.authorize(_principal("u2")).role == "superadmin"
    with pytest.raises(Forbidden):
        gate.authorize(_principal("u3"))


def test_claims_source_unknown_user_is_forbidden():
    gate = AdminGate(ClaimsBackedSource(FakeIdentity()))
    with pytest.raises(Forbidden):
        gate.authorize(_principal("ghost"))


def test_claims_source_ignores_admin_records(db):
    identity = FakeIdentity()
    identity.add_user("u1", "u1@example.com")
    admins_repo.create(db, {"firebaseUid": "u1", "email": "u1@example.com"}, None)
    with pytest.raises(Forbidden):
        AdminGate(build_admin_source("claims", db, identity)).authorize(_principal())


def test_claims_source_needs_identity_provider(db):
    with pytest.raises(ValueError):
        build_admin_source("claims", db, None)


# --------- over HTTP --------- #

def test_plain_user_cannot_write(client, user_headers):
    resp = client.post("/api/admin/condominiums", headers=user_headers, json={
        "name": "X", "address": "Y", "city": "Z", "region": "R", "totalUnits": 1,
    })
    assert resp.status_code == 403
    body = resp.json()
    assert body == {
        "success": False,
        "message": "Access denied. Admin permissions required",
        "error": "FORBIDDEN",
    }


def test_u1_scenario(client, identity, admin_headers):
    """Admin grants u1, u1 creates, admin revokes, u1 is refused."""
    token = identity.add_user("u1", "u1@example.com")
    resp = client.post("/api/admin/admins", headers=admin_headers,
                       json={"firebaseUid": "u1", "email": "u1@example.com"})
    assert resp.status_code == 201
    admin_id = resp.json()["data"]["id"]

    payload = {"name": "Edificio Uno", "address": "Calle 1", "city": "Santiago",
               "region": "RM", "totalUnits": 10}
    assert client.post("/api/admin/condominiums", headers=bearer(token), json=payload).status_code == 201

    assert client.delete(f"/api/admin/admins/{admin_id}", headers=admin_headers).status_code == 200
    resp = client.post("/api/admin/condominiums", headers=bearer(token), json=payload)
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN"


def test_verify_admin_endpoints(client, user_headers, admin_headers):
    assert client.get("/api/admin/admins/verify-admin-db", headers=user_headers).json() == {
        "success": True, "isAdmin": False, "role": "user",
    }
    body = client.get("/api/admin/condominiums/verify-admin", headers=admin_headers).json()
    assert body == {"success": True, "isAdmin": True, "role": "admin"}
