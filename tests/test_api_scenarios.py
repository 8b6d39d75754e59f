# tests/test_api_scenarios.py
from __future__ import annotations


def _testville_apartment(client) -> dict:
    city = client.post("/api/cities", json={"name": "Testville", "state": "TS"}).json()
    building = client.post(
        "/api/buildings",
        json={"name": "Block A", "address": "1 Main St", "cityId": city["id"], "totalUnits": 4},
    ).json()
    r = client.post(
        "/api/apartments",
        json={"apartmentNumber": "1A", "buildingId": building["id"], "bedroomCount": 2, "bathroomCount": 1},
    )
    assert r.status_code == 201
    return r.json()


def test_testville_task_completion_marks_apartment(client):
    apt = _testville_apartment(client)
    assert apt["bedroomCount"] == 2
    assert apt["lastMaintenance"] is None

    r = client.post(
        "/api/tasks",
        json={"type": "corrective", "apartmentId": apt["id"], "issue": "Dripping tap", "status": "pending"},
    )
    assert r.status_code == 201
    task = r.json()
    assert task["taskId"].startswith("MT-")
    assert task["city"]["name"] == "Testville"
    assert task["completedAt"] is None

    r = client.patch(f"/api/tasks/{task['id']}", json={"status": "complete"})
    assert r.status_code == 200
    done = r.json()
    assert done["completedAt"] is not None

    apartment = client.get(f"/api/apartments/{apt['id']}").json()
    assert apartment["lastMaintenance"] is not None
    assert apartment["building"]["name"] == "Block A"
    assert [t["id"] for t in apartment["tasks"]] == [task["id"]]


def test_purchase_order_total_is_recomputed(client):
    user = client.post(
        "/api/users",
        json={"username": "buyer", "password": "pw", "name": "Buyer", "role": "purchasing_agent"},
    ).json()
    assert "password" not in user and "passwordHash" not in user

    bolts = client.post("/api/materials", json={"name": "Bolt", "unit": "box"}).json()
    tape = client.post("/api/materials", json={"name": "Tape", "unit": "roll"}).json()
    po = client.post("/api/purchase-orders", json={"createdBy": user["id"]}).json()
    assert po["totalAmount"] == 0

    r = client.post(f"/api/purchase-orders/{po['id']}/items", json={"materialId": bolts["id"], "quantity": 3, "unitPrice": 10.0})
    assert r.status_code == 201
    assert r.json()["totalPrice"] == 30.0
    client.post(f"/api/purchase-orders/{po['id']}/items", json={"materialId": tape["id"], "quantity": 1, "unitPrice": 5.0})

    got = client.get(f"/api/purchase-orders/{po['id']}").json()
    assert got["totalAmount"] == 35.0
    assert got["createdByUser"]["username"] == "buyer"
    assert [i["material"]["name"] for i in got["items"]] == ["Bolt", "Tape"]


def test_items_for_unknown_order_404(client):
    m = client.post("/api/materials", json={"name": "Bolt", "unit": "box"}).json()
    r = client.post("/api/purchase-orders/999/items", json={"materialId": m["id"], "quantity": 1, "unitPrice": 1})
    assert r.status_code == 404
    assert r.json()["message"] == "Purchase order not found"


def test_task_materials_round_trip(client):
    apt = _testville_apartment(client)
    task = client.post("/api/tasks", json={"type": "corrective", "apartmentId": apt["id"], "issue": "x"}).json()
    m = client.post("/api/materials", json={"name": "Sealant", "unit": "tube", "quantity": 4}).json()

    r = client.post(f"/api/tasks/{task['id']}/materials", json={"materialId": m["id"], "quantity": 2})
    assert r.status_code == 201
    link = r.json()
    assert link["status"] == "needed"
    assert link["material"]["name"] == "Sealant"

    r = client.patch(f"/api/task-materials/{link['id']}", json={"status": "ordered"})
    assert r.json()["status"] == "ordered"

    listed = client.get(f"/api/tasks/{task['id']}/materials").json()
    assert [x["status"] for x in listed] == ["ordered"]
    assert client.get(f"/api/tasks/{task['id']}").json()["materials"][0]["quantity"] == 2

    assert client.get("/api/tasks/999/materials").status_code == 404
    assert client.post("/api/tasks/999/materials", json={"materialId": m["id"], "quantity": 1}).status_code == 404


def test_buildings_filter_by_city(client):
    a = client.post("/api/cities", json={"name": "A", "state": "S"}).json()
    b = client.post("/api/cities", json={"name": "B", "state": "S"}).json()
    client.post("/api/buildings", json={"name": "in-a", "address": "1", "cityId": a["id"], "totalUnits": 1})
    client.post("/api/buildings", json={"name": "in-b", "address": "2", "cityId": b["id"], "totalUnits": 1})

    got = client.get("/api/buildings", params={"cityId": b["id"]}).json()
    assert [x["name"] for x in got] == ["in-b"]
