import pytest

from neighbora.core.auth import DEV_UID, AuthGate, extract_bearer_token
from neighbora.core.errors import (
    ExpiredCredential,
    InvalidCredential,
    MissingCredential,
    ProviderUnavailable,
)
from neighbora.schemas.principal import InsecureDevPrincipal

from conftest import FakeIdentity, bearer, make_settings, dev_token


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("bearer xyz", "xyz"),
    ("Basic abc", None),
    ("Bearer", None),
    ("", None),
    (None, None),
])
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_verified_token_yields_plain_user():
    identity = FakeIdentity()
    token = identity.add_user("u1", "u1@example.com", name="U One")
    principal = AuthGate(identity).authenticate(token)
    assert principal.uid == "u1"
    assert principal.email == "u1@example.com"
    assert principal.role == "user"


def test_missing_token():
    with pytest.raises(MissingCredential):
        AuthGate(FakeIdentity()).authenticate(None)


def test_invalid_token():
    with pytest.raises(InvalidCredential):
        AuthGate(FakeIdentity()).authenticate("garbage")


def test_expired_token():
    identity = FakeIdentity()
    token = identity.add_user("u1", "u1@example.com")
    identity.expired.add(token)
    with pytest.raises(ExpiredCredential):
        AuthGate(identity).authenticate(token)


def test_unconfigured_provider_refuses_traffic():
    token = dev_token({"sub": "attacker", "email": "x@example.com"})
    with pytest.raises(ProviderUnavailable):
        AuthGate(None).authenticate(token)


def test_insecure_dev_mode_reads_unverified_payload():
    token = dev_token({"sub": "dev-42", "email": "dev42@example.com", "name": "Dev"})
    principal = AuthGate(None, insecure_dev_mode=True).authenticate(token)
    assert isinstance(principal, InsecureDevPrincipal)
    assert principal.uid == "dev-42"
    assert principal.role == "user"


def test_insecure_dev_mode_falls_back_to_dev_user():
    principal = AuthGate(None, insecure_dev_mode=True).authenticate("not-a-jwt")
    assert principal.uid == DEV_UID


def test_insecure_dev_mode_ignores_expiry():
    token = dev_token({"user_id": "dev-7", "exp": 1000000000})
    assert AuthGate(None, insecure_dev_mode=True).authenticate(token).uid == "dev-7"


def test_insecure_dev_mode_malformed_segments_fall_back():
    assert AuthGate(None, insecure_dev_mode=True).authenticate("a.b.c").uid == DEV_UID


def test_insecure_dev_mode_still_needs_a_token():
    with pytest.raises(MissingCredential):
        AuthGate(None, insecure_dev_mode=True).authenticate("")


def test_production_refuses_insecure_dev_auth():
    with pytest.raises(ValueError):
        make_settings(APP_ENV="production", ALLOW_INSECURE_DEV_AUTH=True)


# --------- over HTTP --------- #

def test_missing_header_is_401_envelope(client):
    resp = client.get("/api/admin/condominiums")
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "MISSING_CREDENTIAL"
    assert body["message"] == "Authentication token not provided"


def test_invalid_token_is_401_envelope(client):
    resp = client.get("/api/admin/condominiums", headers=bearer("nope"))
    assert resp.status_code == 401
    assert resp.json()["error"] == "INVALID_CREDENTIAL"


def test_expired_token_has_distinct_code(client, identity):
    token = identity.add_user("u1", "u1@example.com")
    identity.expired.add(token)
    resp = client.get("/api/admin/condominiums", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.json()["error"] == "EXPIRED_CREDENTIAL"


def test_degraded_app_without_provider(db):
    from fastapi.testclient import TestClient
    from neighbora.main import create_app

    client = TestClient(create_app(make_settings(), db=db))
    resp = client.get("/api/admin/condominiums", headers=bearer(dev_token({"sub": "x"})))
    assert resp.status_code == 503
    assert resp.json()["error"] == "AUTH_PROVIDER_UNAVAILABLE"


def test_dev_mode_app_admits_unverified_user(db):
    from fastapi.testclient import TestClient
    from neighbora.main import create_app

    client = TestClient(create_app(make_settings(ALLOW_INSECURE_DEV_AUTH=True), db=db))
    resp = client.get("/api/auth/me", headers=bearer(dev_token({"sub": "dev-7", "email": "d@example.com"})))
    assert resp.status_code == 200
    assert resp.json()["user"]["uid"] == "dev-7"
