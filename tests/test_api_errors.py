# tests/test_api_errors.py
from __future__ import annotations

from fastapi.testclient import TestClient

from airmaint.main import create_app
from airmaint.storage import MemStorage


def test_validation_errors_are_400_with_details(client):
    r = client.post("/api/tasks", json={"type": "corrective"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid request data"
    fields = {tuple(e["loc"])[-1] for e in body["errors"]}
    assert {"apartmentId", "issue"} <= fields


def test_enum_membership_is_checked(client):
    r = client.post("/api/cities", json={"name": "X", "state": "Y"})
    city_id = r.json()["id"]
    r = client.post("/api/buildings", json={"name": "B", "address": "a", "cityId": str(city_id), "totalUnits": "3"})
    assert r.status_code == 201
    assert r.json()["totalUnits"] == 3

    r = client.post("/api/users", json={"username": "u", "password": "p", "name": "U", "role": "boss"})
    assert r.status_code == 400


def test_patch_rejects_unknown_fields_and_null_required_fields(client):
    city = client.post("/api/cities", json={"name": "X", "state": "Y"}).json()
    assert client.patch(f"/api/cities/{city['id']}", json={"mayor": "Z"}).status_code == 400
    assert client.patch(f"/api/cities/{city['id']}", json={"name": None}).status_code == 400
    assert client.patch(f"/api/cities/{city['id']}", json={"name": "Z"}).json()["name"] == "Z"


def test_missing_records_are_404(client):
    for path in ("/api/users/9", "/api/cities/9", "/api/buildings/9", "/api/apartments/9", "/api/tasks/9",
                 "/api/materials/9", "/api/purchase-orders/9"):
        r = client.get(path)
        assert r.status_code == 404, path
        assert "message" in r.json()

    r = client.patch("/api/materials/9", json={"quantity": 1})
    assert r.status_code == 404
    assert r.json()["message"] == "Material with id 9 not found"


def test_duplicate_username_is_409(client):
    body = {"username": "dup", "password": "p", "name": "D", "role": "maintenance_agent"}
    assert client.post("/api/users", json=body).status_code == 201
    r = client.post("/api/users", json=body)
    assert r.status_code == 409


def test_unhandled_errors_are_500(settings, monkeypatch):
    storage = MemStorage()

    def boom(**_kw):
        raise RuntimeError("boom")

    monkeypatch.setattr(storage, "list_tasks", boom)
    with TestClient(create_app(settings, storage), raise_server_exceptions=False) as c:
        r = c.get("/api/tasks")
    assert r.status_code == 500
    assert r.json() == {"message": "boom"}


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_unsafe_request_ids_are_replaced(client):
    r = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert r.headers["X-Request-ID"] != "bad id with spaces"
    assert len(r.headers["X-Request-ID"]) == 36
