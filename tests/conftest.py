"""
Shared pytest fixtures: in-memory MongoDB (mongomock), a fake identity provider
and a TestClient around `create_app`.
"""
from typing import Any, Dict, Optional

import jwt
import mongomock
import pytest
from fastapi.testclient import TestClient

from neighbora.config import Settings
from neighbora.core.errors import ExpiredCredential, InvalidCredential, NotFound
from neighbora.main import create_app
from neighbora.repositories import admins as admins_repo


class FakeIdentity:
    """Stands in for FirebaseIdentityProvider: tokens map to claims, uids to user records."""

    def __init__(self):
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.expired = set()
        self.claim_calls = []

    def add_user(self, uid: str, email: str, token: Optional[str] = None, name: Optional[str] = None,
                 claims: Optional[Dict[str, Any]] = None) -> str:
        token = token or f"token-{uid}"
        self.tokens[token] = {"uid": uid, "email": email, "name": name}
        self.users[uid] = {
            "uid": uid,
            "email": email,
            "displayName": name,
            "photoURL": None,
            "phoneNumber": None,
            "emailVerified": True,
            "disabled": False,
            "customClaims": dict(claims or {}),
            "createdAt": 1700000000000,
            "lastSignInTime": 1700000500000,
        }
        return token

    def verify_credential(self, token: str) -> Dict[str, Any]:
        if token in self.expired:
            raise ExpiredCredential()
        if token not in self.tokens:
            raise InvalidCredential()
        return dict(self.tokens[token])

    def fetch_user(self, uid: str) -> Dict[str, Any]:
        if uid not in self.users:
            raise NotFound("User not found")
        return dict(self.users[uid])

    def get_user_by_email(self, email: str) -> Dict[str, Any]:
        for user in self.users.values():
            if user["email"] == email:
                return dict(user)
        raise NotFound(f"User not found: {email}")

    def set_custom_claims(self, uid: str, claims: Optional[Dict[str, Any]]) -> None:
        self.claim_calls.append((uid, claims))
        self.users[uid]["customClaims"] = dict(claims or {})


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "test",
        "DEBUG": False,
        "MONGO_URI": "mongodb://localhost:27017",
        "MONGO_DB_NAME": "neighbora_test",
        "FIREBASE_PROJECT_ID": None,
        "FIREBASE_CRED_FILE": None,
        "FIREBASE_SERVICE_ACCOUNT_KEY": None,
        "ALLOW_INSECURE_DEV_AUTH": False,
        "ADMIN_AUTH_SOURCE": "record",
        "PAYMENT_MAX_RETRIES": 5,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def dev_token(payload: Dict[str, Any]) -> str:
    """A well-formed JWT signed with a key the server never checks."""
    return jwt.encode(payload, "throwaway-key-not-known-to-anyone-0000", algorithm="HS256")


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db():
    return mongomock.MongoClient()["neighbora_test"]


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings, db, identity):
    return create_app(settings, db=db, identity=identity)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user_headers(identity):
    return bearer(identity.add_user("user-1", "resident@example.com", name="Resident One"))


@pytest.fixture
def admin_headers(identity, db):
    token = identity.add_user("admin-1", "admin@example.com", name="Admin One")
    admins_repo.create(db, {"firebaseUid": "admin-1", "email": "admin@example.com", "role": "admin"}, None)
    return bearer(token)


@pytest.fixture
def condominium(client, admin_headers):
    resp = client.post("/api/admin/condominiums", headers=admin_headers, json={
        "name": "Torres del Parque",
        "address": "Av. Siempre Viva 742",
        "city": "Santiago",
        "region": "Metropolitana",
        "totalUnits": 40,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def prop(client, admin_headers, condominium):
    resp = client.post(
        f"/api/admin/properties/condominium/{condominium['id']}",
        headers=admin_headers,
        json={
            "number": "101",
            "floor": 1,
            "block": "A",
            "owner": {"firebaseUid": "user-1", "name": "Resident One", "email": "resident@example.com"},
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def expense(client, admin_headers, condominium, prop):
    resp = client.post("/api/admin/common-expenses", headers=admin_headers, json={
        "condominiumId": condominium["id"],
        "propertyId": prop["id"],
        "period": "2024-03",
        "amounts": {"commonExpense": 90000, "reserveFund": 10000, "total": 100000},
        "issueDate": "2024-03-01T00:00:00Z",
        "dueDate": "2024-03-10T00:00:00Z",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
