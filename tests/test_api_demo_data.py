# tests/test_api_demo_data.py
from __future__ import annotations

from datetime import datetime


def test_type_and_status_filters_are_conjunctive(demo_client):
    got = demo_client.get("/api/tasks", params={"type": "preventive", "status": "scheduled"}).json()
    assert [t["taskId"] for t in got] == ["MT-2019"]
    assert all(t["type"] == "preventive" and t["status"] == "scheduled" for t in got)


def test_apartments_by_building(demo_client):
    got = demo_client.get("/api/apartments", params={"buildingId": 2}).json()
    assert [a["apartmentNumber"] for a in got] == ["310"]
    assert got[0]["city"]["name"] == "Cancún"


def test_seeded_purchase_order_totals(demo_client):
    orders = {po["poNumber"]: po for po in demo_client.get("/api/purchase-orders").json()}
    assert orders["PO-001"]["totalAmount"] == 250.74
    assert orders["PO-002"]["totalAmount"] == 582.25
    assert len(orders["PO-002"]["items"]) == 3


def test_users_by_role(demo_client):
    agents = demo_client.get("/api/users/role/maintenance_agent").json()
    assert [u["username"] for u in agents] == ["carlos", "ana", "roberto", "maria"]
    assert demo_client.get("/api/users/role/janitor").status_code == 400


def test_dashboard_stats(demo_client):
    stats = demo_client.get("/api/dashboard/stats").json()

    assert stats["pendingTasks"] == 3
    assert stats["correctiveTasks"] == 3
    assert stats["preventiveTasks"] == 2
    assert stats["activeApartments"] == 4
    assert stats["tasksByStatus"] == {"pending": 1, "inProgress": 1, "scheduled": 1, "complete": 2, "verified": 0}

    by_city = {c["name"]: c["count"] for c in stats["tasksByCity"]}
    assert by_city == {"Mexico City": 1, "Cancún": 2, "Guadalajara": 1, "Monterrey": 1}

    recent = stats["recentTasks"]
    assert len(recent) <= 5
    reported = [datetime.fromisoformat(t["reportedAt"]) for t in recent]
    assert reported == sorted(reported, reverse=True)
    assert recent[0]["taskId"] == "MT-2023"
    assert recent[0]["assignedUser"]["username"] == "carlos"

    apartments = stats["recentApartments"]
    assert [a["apartmentNumber"] for a in apartments] == ["512", "310", "203"]
    assert apartments[0]["recentTask"]["taskId"] == "MT-2021"
    assert all(a["lastMaintenance"] is not None for a in apartments)


def test_login_and_me(demo_client):
    r = demo_client.post("/api/login", json={"username": "miguel", "password": "password"})
    assert r.status_code == 200
    body = r.json()
    assert body["role"] == "control_center"
    assert "passwordHash" not in body

    me = demo_client.get("/api/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "miguel"


def test_login_failures(demo_client):
    assert demo_client.post("/api/login", json={"username": "miguel"}).status_code == 400
    r = demo_client.post("/api/login", json={"username": "miguel", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid credentials"}
    assert demo_client.get("/api/me").status_code == 401
    assert demo_client.get("/api/me", headers={"Authorization": "Bearer junk"}).status_code == 401
