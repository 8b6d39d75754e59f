# airmaint/services/expansion.py
"""
Composed read models.

Each expand_* resolves foreign keys one row at a time through the store (N+1).
Handlers only call these functions, so a batched implementation can replace them
without touching the routers.
"""
from __future__ import annotations

from typing import Optional

from ..schemas import (
    Apartment,
    ApartmentDetail,
    ApartmentView,
    Building,
    City,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderItemView,
    PurchaseOrderView,
    Task,
    TaskMaterial,
    TaskMaterialView,
    TaskView,
    UserOut,
)
from ..storage.base import Storage


def _public_user(storage: Storage, user_id: Optional[int]) -> Optional[UserOut]:
    if user_id is None:
        return None
    user = storage.get_user(user_id)
    return user.public() if user is not None else None


def _location(storage: Storage, building_id: int) -> tuple[Optional[Building], Optional[City]]:
    building = storage.get_building(building_id)
    city = storage.get_city(building.city_id) if building is not None else None
    return building, city


def expand_apartment(storage: Storage, apartment: Apartment) -> ApartmentView:
    building, city = _location(storage, apartment.building_id)
    return ApartmentView(**apartment.model_dump(), building=building, city=city)


def expand_apartment_detail(storage: Storage, apartment: Apartment) -> ApartmentDetail:
    building, city = _location(storage, apartment.building_id)
    tasks = storage.list_tasks(apartment_id=apartment.id)
    return ApartmentDetail(**apartment.model_dump(), building=building, city=city, tasks=tasks)


def expand_task_material(storage: Storage, tm: TaskMaterial) -> TaskMaterialView:
    return TaskMaterialView(**tm.model_dump(), material=storage.get_material(tm.material_id))


def expand_task(storage: Storage, task: Task) -> TaskView:
    apartment = storage.get_apartment(task.apartment_id)
    building, city = _location(storage, apartment.building_id) if apartment is not None else (None, None)
    materials = [expand_task_material(storage, tm) for tm in storage.list_task_materials(task_id=task.id)]
    return TaskView(
        **task.model_dump(),
        apartment=apartment,
        building=building,
        city=city,
        assigned_user=_public_user(storage, task.assigned_to),
        materials=materials,
    )


def expand_purchase_order_item(storage: Storage, item: PurchaseOrderItem) -> PurchaseOrderItemView:
    return PurchaseOrderItemView(**item.model_dump(), material=storage.get_material(item.material_id))


def expand_purchase_order(storage: Storage, po: PurchaseOrder) -> PurchaseOrderView:
    items = [
        expand_purchase_order_item(storage, item)
        for item in storage.list_purchase_order_items(purchase_order_id=po.id)
    ]
    return PurchaseOrderView(
        **po.model_dump(),
        created_by_user=_public_user(storage, po.created_by),
        items=items,
    )
