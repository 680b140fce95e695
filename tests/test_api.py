# tests/test_api.py

"""
HTTP tests: routing, error mapping and response shapes.
"""

from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from core.history import HISTORY_COLLECTION


INCIDENT_BODY = {
    "hotelId": "H1",
    "date": "2024-05-01T09:00:00Z",
    "description": "Broken window",
    "statusId": "open",
    "photoURL": "https://blobs.example/1.png",
}


def test_health_app(client: TestClient):
    response = client.get("/health/app")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db_reports_status(client: TestClient):
    with patch("routers.health.ping_supabase", new=AsyncMock(return_value={"status": "ok", "tables": {}})):
        response = client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_requests_without_token_are_rejected(client: TestClient):
    response = client.get("/incidents")
    assert response.status_code in (401, 403)


def test_my_hotels(client: TestClient, login):
    login("alice@hotels.test")
    response = client.get("/me/hotels")
    assert response.status_code == 200
    assert response.json() == {"allHotels": False, "hotels": ["H1", "H2"]}

    login("admin@hotels.test")
    assert client.get("/me/hotels").json()["allHotels"] is True


def test_create_list_and_read_incident(client: TestClient, login, store):
    login("alice@hotels.test")

    created = client.post("/incidents", json=INCIDENT_BODY)
    assert created.status_code == 200
    body = created.json()
    assert body["history_id"]
    assert body["warning"] is None

    listed = client.get("/incidents")
    assert listed.status_code == 200
    rows = listed.json()
    assert len(rows) == 1
    assert rows[0]["hotelId"] == "H1"
    assert rows[0]["photoURL"] == "https://blobs.example/1.png"
    assert rows[0]["createdBy"] == "alice-1"

    fetched = client.get(f"/incidents/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["description"] == "Broken window"


def test_create_in_foreign_hotel_is_forbidden(client: TestClient, login):
    login("bob@hotels.test")
    response = client.post("/incidents", json=INCIDENT_BODY)
    assert response.status_code == 403
    assert response.json() == {"detail": "Not authorized"}


def test_list_without_access_is_empty(client: TestClient, login, store):
    store.seed("incidents", {"hotelId": "H1", "date": "2024-05-01T09:00:00Z", "description": "x"})
    login("dan@hotels.test")
    response = client.get("/incidents")
    assert response.status_code == 200
    assert response.json() == []


def test_unknown_entity_is_404(client: TestClient, login):
    login("alice@hotels.test")
    assert client.get("/incidents/missing").status_code == 404
    assert client.patch("/incidents/missing", json={"statusId": "closed"}).status_code == 404


def test_storage_outage_is_503(client: TestClient, login, store):
    login("alice@hotels.test")
    store.fail_on.add(("query", "users"))
    response = client.get("/incidents")
    assert response.status_code == 503
    assert "try again" in response.json()["detail"]


def test_patch_and_history(client: TestClient, login, store):
    login("alice@hotels.test")
    entity_id = client.post("/incidents", json=INCIDENT_BODY).json()["id"]

    patched = client.patch(f"/incidents/{entity_id}", json={"statusId": "resolved"})
    assert patched.status_code == 200

    history = client.get(f"/incidents/{entity_id}/history")
    assert history.status_code == 200
    entries = history.json()
    assert [entry["operation"] for entry in entries] == ["update", "create"]
    assert entries[0]["actor"] == "Alice"
    labels = [change["label"] for change in entries[0]["changes"]]
    assert "Status" in labels
    assert "Resolved on" in labels


def test_history_warning_is_reported(client: TestClient, login, store):
    login("alice@hotels.test")
    store.fail_on.add(("insert", HISTORY_COLLECTION))
    response = client.post("/incidents", json=INCIDENT_BODY)
    assert response.status_code == 200
    assert response.json()["warning"]
    assert response.json()["history_id"] is None


def test_delete_requires_creator(client: TestClient, login, store):
    login("alice@hotels.test")
    entity_id = client.post("/incidents", json=INCIDENT_BODY).json()["id"]

    login("carol@hotels.test")
    assert client.delete(f"/incidents/{entity_id}").status_code == 403

    login("alice@hotels.test")
    assert client.delete(f"/incidents/{entity_id}").status_code == 200
    assert store.rows("incidents") == []


def test_incident_stats(client: TestClient, login, store):
    store.seed("incidents", {"hotelId": "H1", "statusId": "open", "date": "2024-05-01T09:00:00Z"})
    login("alice@hotels.test")
    response = client.get("/incidents/stats")
    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert response.json()["open"] == 1


def test_lost_item_return_flow(client: TestClient, login, store):
    login("alice@hotels.test")
    created = client.post("/lost-items", json={
        "hotelId": "H2",
        "discoveryDate": "2024-05-01T10:00:00Z",
        "description": "Blue umbrella",
        "itemTypeId": "umbrella",
    })
    assert created.status_code == 200
    item_id = created.json()["id"]

    returned = client.post(f"/lost-items/{item_id}/return", json={"returnedNotes": "Guest picked it up"})
    assert returned.status_code == 200

    item = client.get(f"/lost-items/{item_id}").json()
    assert item["status"] == "returned"
    assert item["returnedNotes"] == "Guest picked it up"

    stats = client.get("/lost-items/stats").json()
    assert stats["returned"] == 1
    assert stats["returnRate"] == 100


def test_interventions_filter_by_hotel(client: TestClient, login, store):
    store.seed("technical_interventions", {"hotelId": "H1", "title": "Boiler", "date": "2024-05-01T09:00:00Z"})
    store.seed("technical_interventions", {"hotelId": "H2", "title": "Lift", "date": "2024-05-02T09:00:00Z"})
    login("alice@hotels.test")

    response = client.get("/interventions", params={"hotel": "H2"})
    assert response.status_code == 200
    assert [row["title"] for row in response.json()] == ["Lift"]


def test_patch_with_null_hotel_is_forbidden(client: TestClient, login, store):
    entity_id = store.seed("incidents", {"hotelId": "H1", "date": "2024-05-01T09:00:00Z", "description": "x"})
    login("alice@hotels.test")
    response = client.patch(f"/incidents/{entity_id}", json={"hotelId": None})
    assert response.status_code == 403
    assert store.collections["incidents"][entity_id]["hotelId"] == "H1"


def test_all_routers_are_mounted(client: TestClient):
    assert client.get("/health/app").status_code == 200
    for path in ("/incidents", "/interventions", "/lost-items", "/me/hotels"):
        assert client.get(path).status_code in (401, 403)
