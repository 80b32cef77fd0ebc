import pytest

BASE = "/api/admin/publications"


@pytest.fixture
def publication(client, admin_headers, condominium):
    resp = client.post(BASE, headers=admin_headers, json={
        "condominiumId": condominium["id"],
        "title": "Corte de agua",
        "content": "El martes se corta el agua de 10 a 14 hrs.",
        "category": "maintenance",
        "priority": "high",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_created_publication(publication):
    assert publication["views"] == 0
    assert publication["isVisible"] is True
    assert publication["author"] == {"firebaseUid": "admin-1", "name": "Admin One", "role": "admin"}


def test_listing_filters_and_pagination(client, admin_headers, user_headers, condominium, publication):
    client.post(BASE, headers=admin_headers, json={
        "condominiumId": condominium["id"], "title": "Asamblea", "content": "Jueves 19:00", "category": "event",
    })
    data = client.get(f"{BASE}/condominium/{condominium['id']}", headers=user_headers).json()["data"]
    assert data["pagination"]["total"] == 2
    assert {p["title"] for p in data["publications"]} == {"Asamblea", "Corte de agua"}

    data = client.get(BASE, headers=user_headers,
                      params={"condominiumId": condominium["id"], "category": "maintenance"}).json()["data"]
    assert [p["id"] for p in data["publications"]] == [publication["id"]]

    data = client.get(f"{BASE}/condominium/{condominium['id']}", headers=user_headers,
                      params={"limit": 1, "page": 2}).json()["data"]
    assert data["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}
    assert len(data["publications"]) == 1


def test_condominium_id_is_required(client, user_headers):
    resp = client.get(BASE, headers=user_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "condominiumId is required"


def test_hidden_and_deleted_are_not_listed(client, admin_headers, user_headers, condominium, publication):
    client.put(f"{BASE}/{publication['id']}", headers=admin_headers, json={"isVisible": False})
    data = client.get(f"{BASE}/condominium/{condominium['id']}", headers=user_headers).json()["data"]
    assert data["publications"] == []

    client.put(f"{BASE}/{publication['id']}", headers=admin_headers, json={"isVisible": True})
    assert client.delete(f"{BASE}/{publication['id']}", headers=admin_headers).json()["data"]["isActive"] is False
    data = client.get(f"{BASE}/condominium/{condominium['id']}", headers=user_headers).json()["data"]
    assert data["publications"] == []


def test_reading_counts_views(client, user_headers, publication):
    client.get(f"{BASE}/{publication['id']}", headers=user_headers)
    data = client.get(f"{BASE}/{publication['id']}", headers=user_headers).json()["data"]
    assert data["views"] == 2


def test_deleted_publication_cannot_be_read(client, admin_headers, user_headers, publication):
    client.delete(f"{BASE}/{publication['id']}", headers=admin_headers)
    resp = client.get(f"{BASE}/{publication['id']}", headers=user_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Publication not found"


def test_reactions_and_comments(client, admin_headers, publication):
    resp = client.post(f"{BASE}/{publication['id']}/reaction", headers=admin_headers, json={"type": "useful"})
    assert resp.json()["data"]["reactions"][0]["type"] == "useful"

    resp = client.post(f"{BASE}/{publication['id']}/reaction", headers=admin_headers, json={"type": "angry"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid reaction type"

    resp = client.post(f"{BASE}/{publication['id']}/comment", headers=admin_headers, json={"content": ""})
    assert resp.status_code == 400

    resp = client.post(f"{BASE}/{publication['id']}/comment", headers=admin_headers, json={"content": "Gracias"})
    comment = resp.json()["data"]["comments"][0]
    assert comment["content"] == "Gracias"
    assert comment["userName"] == "Admin One"
    assert comment["isEdited"] is False


def test_stats(client, admin_headers, user_headers, condominium, publication):
    client.get(f"{BASE}/{publication['id']}", headers=user_headers)
    client.post(f"{BASE}/{publication['id']}/reaction", headers=admin_headers, json={"type": "like"})
    data = client.get(f"{BASE}/condominium/{condominium['id']}/stats", headers=admin_headers).json()["data"]
    assert data["totalPublications"] == 1
    assert data["totalViews"] == 1
    assert data["byCategory"] == [{"_id": "maintenance", "count": 1, "totalViews": 1, "avgReactions": 1.0}]


def test_stats_need_admin(client, user_headers, condominium):
    resp = client.get(f"{BASE}/condominium/{condominium['id']}/stats", headers=user_headers)
    assert resp.status_code == 403
