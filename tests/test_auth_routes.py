from conftest import bearer


def test_login(client, identity):
    token = identity.add_user("u1", "u1@example.com", name="U One")
    resp = client.post("/api/auth/login", json={"idToken": token})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "user": {
            "uid": "u1",
            "email": "u1@example.com",
            "displayName": "U One",
            "photoURL": None,
            "emailVerified": True,
            "createdAt": 1700000000000,
        },
    }


def test_login_requires_token(client):
    resp = client.post("/api/auth/login", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_FAILURE"


def test_login_with_bad_token(client):
    resp = client.post("/api/auth/login", json={"idToken": "bad"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "INVALID_CREDENTIAL"


def test_verify_and_me(client, identity):
    token = identity.add_user("u1", "u1@example.com", name="U One")
    body = client.get("/api/auth/verify", headers=bearer(token)).json()
    assert body["message"] == "Token is valid"
    assert body["user"]["uid"] == "u1"

    user = client.get("/api/auth/me", headers=bearer(token)).json()["user"]
    assert user["disabled"] is False
    assert user["lastSignInTime"] == 1700000500000
    assert "phoneNumber" in user


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
