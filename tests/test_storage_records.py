# tests/test_storage_records.py
from __future__ import annotations

import pytest

from airmaint.schemas import (
    ApartmentCreate,
    BuildingCreate,
    CityCreate,
    CityUpdate,
    MaterialCreate,
    PurchaseOrderCreate,
    PurchaseOrderItemCreate,
    PurchaseOrderUpdate,
    UserCreate,
    UserUpdate,
)
from airmaint.services.auth_service import verify_password
from airmaint.storage import ConflictError, NotFoundError, SqlStorage


def _user(storage, username: str = "pat", role: str = "purchasing_agent"):
    return storage.create_user(UserCreate(username=username, password="secret", name="Pat", role=role))


def test_users_store_hashed_passwords(storage):
    user = _user(storage)
    assert user.password_hash != "secret"
    assert verify_password("secret", user.password_hash)
    assert storage.get_user_by_username("pat").id == user.id

    updated = storage.update_user(user.id, UserUpdate(password="changed"))
    assert verify_password("changed", updated.password_hash)
    assert not verify_password("secret", updated.password_hash)


def test_duplicate_username_conflicts(storage):
    _user(storage)
    with pytest.raises(ConflictError):
        _user(storage)


def test_list_users_by_role(storage):
    _user(storage, "a", "maintenance_agent")
    _user(storage, "b", "purchasing_agent")
    _user(storage, "c", "maintenance_agent")
    assert [u.username for u in storage.list_users(role="maintenance_agent")] == ["a", "c"]


def test_city_defaults_and_partial_update(storage):
    city = storage.create_city(CityCreate(name="Testville", state="TS"))
    assert city.country == "Mexico"
    updated = storage.update_city(city.id, CityUpdate(state="XX"))
    assert updated.name == "Testville"
    assert updated.state == "XX"


def test_apartments_by_building_keep_insertion_order(storage):
    city = storage.create_city(CityCreate(name="Testville", state="TS"))
    a = storage.create_building(BuildingCreate(name="A", address="1", city_id=city.id, total_units=3))
    b = storage.create_building(BuildingCreate(name="B", address="2", city_id=city.id, total_units=3))
    ids = []
    for n, building in (("1", a), ("2", b), ("3", a), ("4", a)):
        apt = storage.create_apartment(
            ApartmentCreate(apartment_number=n, building_id=building.id, bedroom_count=1, bathroom_count=1)
        )
        if building is a:
            ids.append(apt.id)
    assert [x.id for x in storage.list_apartments(building_id=a.id)] == ids
    assert [x.id for x in storage.list_buildings(city_id=city.id)] == [a.id, b.id]


def test_purchase_order_total_follows_items(storage):
    buyer = _user(storage)
    bolts = storage.create_material(MaterialCreate(name="Bolt", unit="box"))
    tape = storage.create_material(MaterialCreate(name="Tape", unit="roll"))

    po = storage.create_purchase_order(PurchaseOrderCreate(created_by=buyer.id))
    assert po.po_number == "PO-001"
    assert po.status == "draft"
    assert po.total_amount == 0.0

    first = storage.create_purchase_order_item(
        PurchaseOrderItemCreate(purchase_order_id=po.id, material_id=bolts.id, quantity=3, unit_price=10.0)
    )
    assert first.total_price == 30.0
    assert storage.get_purchase_order(po.id).total_amount == 30.0

    storage.create_purchase_order_item(
        PurchaseOrderItemCreate(purchase_order_id=po.id, material_id=tape.id, quantity=1, unit_price=5.0)
    )
    assert storage.get_purchase_order(po.id).total_amount == 35.0
    assert len(storage.list_purchase_order_items(purchase_order_id=po.id)) == 2


def test_line_totals_round_to_cents(storage):
    buyer = _user(storage)
    m = storage.create_material(MaterialCreate(name="Valve", unit="each"))
    po = storage.create_purchase_order(PurchaseOrderCreate(created_by=buyer.id))
    item = storage.create_purchase_order_item(
        PurchaseOrderItemCreate(purchase_order_id=po.id, material_id=m.id, quantity=3, unit_price=14.33)
    )
    assert item.total_price == 42.99


def test_item_for_missing_order_is_rejected(storage):
    m = storage.create_material(MaterialCreate(name="Valve", unit="each"))
    with pytest.raises(NotFoundError):
        storage.create_purchase_order_item(
            PurchaseOrderItemCreate(purchase_order_id=42, material_id=m.id, quantity=1, unit_price=1.0)
        )
    assert storage.list_purchase_order_items() == []


def test_duplicate_po_number_conflicts(storage):
    buyer = _user(storage)
    storage.create_purchase_order(PurchaseOrderCreate(po_number="PO-777", created_by=buyer.id))
    with pytest.raises(ConflictError):
        storage.create_purchase_order(PurchaseOrderCreate(po_number="PO-777", created_by=buyer.id))


def test_purchase_order_status_update(storage):
    buyer = _user(storage)
    po = storage.create_purchase_order(PurchaseOrderCreate(created_by=buyer.id, notes="n"))
    updated = storage.update_purchase_order(po.id, PurchaseOrderUpdate(status="submitted"))
    assert updated.status == "submitted"
    assert updated.notes == "n"
    assert storage.list_purchase_orders(status="submitted") == [updated]


def test_sql_foreign_keys_are_enforced(storage):
    if not isinstance(storage, SqlStorage):
        pytest.skip("foreign keys are a SQL store property")
    with pytest.raises(ConflictError):
        storage.create_building(BuildingCreate(name="Ghost", address="?", city_id=999, total_units=1))
    assert storage.list_buildings() == []


def test_counts_cover_every_table(storage):
    _user(storage)
    counts = storage.counts()
    assert counts["users"] == 1
    assert counts["purchase_order_items"] == 0
    assert len(counts) == 9


def test_sql_item_and_order_total_roll_back_together(storage, monkeypatch):
    if not isinstance(storage, SqlStorage):
        pytest.skip("rollback is a SQL store property")
    buyer = _user(storage)
    m = storage.create_material(MaterialCreate(name="Valve", unit="each"))
    po = storage.create_purchase_order(PurchaseOrderCreate(created_by=buyer.id))

    def failing_update(entity, record_id, values):
        raise RuntimeError("write failed")

    with monkeypatch.context() as patch:
        patch.setattr(storage, "_update", failing_update)
        with pytest.raises(RuntimeError):
            storage.create_purchase_order_item(
                PurchaseOrderItemCreate(purchase_order_id=po.id, material_id=m.id, quantity=2, unit_price=3.0)
            )

    assert storage.list_purchase_order_items(purchase_order_id=po.id) == []
    assert storage.get_purchase_order(po.id).total_amount == 0.0


def test_counts_do_not_load_rows(storage, monkeypatch):
    _user(storage)

    def no_listing(*_a, **_kw):
        raise AssertionError("counts() should not list rows")

    monkeypatch.setattr(storage, "_list", no_listing)
    assert storage.counts()["users"] == 1
