# airmaint/storage/base.py
from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ContextManager, Optional

from pydantic import BaseModel

from ..schemas import (
    Apartment,
    ApartmentCreate,
    ApartmentUpdate,
    Building,
    BuildingCreate,
    BuildingUpdate,
    City,
    CityCreate,
    CityUpdate,
    Material,
    MaterialCreate,
    MaterialUpdate,
    PurchaseOrder,
    PurchaseOrderCreate,
    PurchaseOrderItem,
    PurchaseOrderItemCreate,
    PurchaseOrderUpdate,
    Task,
    TaskCreate,
    TaskMaterial,
    TaskMaterialCreate,
    TaskMaterialUpdate,
    TaskUpdate,
    User,
    UserCreate,
    UserUpdate,
)
from ..services.auth_service import hash_password


class StorageError(Exception):
    pass


class NotFoundError(StorageError):
    pass


class ConflictError(StorageError):
    pass


class Entity(str, enum.Enum):
    USERS = "users"
    CITIES = "cities"
    BUILDINGS = "buildings"
    APARTMENTS = "apartments"
    TASKS = "tasks"
    MATERIALS = "materials"
    TASK_MATERIALS = "task_materials"
    PURCHASE_ORDERS = "purchase_orders"
    PURCHASE_ORDER_ITEMS = "purchase_order_items"


RECORD_TYPES: dict[Entity, type[BaseModel]] = {
    Entity.USERS: User,
    Entity.CITIES: City,
    Entity.BUILDINGS: Building,
    Entity.APARTMENTS: Apartment,
    Entity.TASKS: Task,
    Entity.MATERIALS: Material,
    Entity.TASK_MATERIALS: TaskMaterial,
    Entity.PURCHASE_ORDERS: PurchaseOrder,
    Entity.PURCHASE_ORDER_ITEMS: PurchaseOrderItem,
}

LABELS: dict[Entity, str] = {
    Entity.USERS: "User",
    Entity.CITIES: "City",
    Entity.BUILDINGS: "Building",
    Entity.APARTMENTS: "Apartment",
    Entity.TASKS: "Task",
    Entity.MATERIALS: "Material",
    Entity.TASK_MATERIALS: "Task material",
    Entity.PURCHASE_ORDERS: "Purchase order",
    Entity.PURCHASE_ORDER_ITEMS: "Purchase order item",
}


def _filters(**kw: Any) -> dict[str, Any]:
    return {k: v for k, v in kw.items() if v is not None}


class Storage(ABC):
    """
    Entity access independent of the backing mechanism.

    Subclasses provide the row primitives (_get/_list/_insert/_update/_max_id) and
    transaction(). Everything else (defaults, generated codes, uniqueness, the task
    completion cascade and purchase order totals) lives here so both backends
    behave the same.

    Records are the pydantic models from airmaint.schemas. Lists come back in
    insertion (id) order.
    """

    backend: str = "abstract"

    # -------------------- backend primitives --------------------

    @abstractmethod
    def _get(self, entity: Entity, record_id: int) -> Optional[BaseModel]: ...

    @abstractmethod
    def _list(self, entity: Entity, **filters: Any) -> list[BaseModel]: ...

    @abstractmethod
    def _insert(self, entity: Entity, values: dict[str, Any]) -> BaseModel: ...

    @abstractmethod
    def _update(self, entity: Entity, record_id: int, values: dict[str, Any]) -> BaseModel:
        """Shallow merge; raises NotFoundError if the id is absent."""

    @abstractmethod
    def _count(self, entity: Entity) -> int: ...

    @abstractmethod
    def _max_id(self, entity: Entity) -> int: ...

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        """
        Groups several primitive calls into one unit of work. Re-entrant: nested
        calls join the outermost one.
        """

    # -------------------- shared helpers --------------------

    def _require(self, entity: Entity, record_id: int) -> Any:
        row = self._get(entity, record_id)
        if row is None:
            raise NotFoundError(f"{LABELS[entity]} with id {record_id} not found")
        return row

    def _find_one(self, entity: Entity, **filters: Any) -> Any:
        rows = self._list(entity, **filters)
        return rows[0] if rows else None

    def _next_code(self, entity: Entity, field: str, prefix: str, width: int) -> str:
        n = self._max_id(entity) + 1
        while True:
            code = f"{prefix}-{n:0{width}d}"
            if self._find_one(entity, **{field: code}) is None:
                return code
            n += 1

    def counts(self) -> dict[str, int]:
        return {e.value: self._count(e) for e in Entity}

    # -------------------- users --------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self._get(Entity.USERS, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._find_one(Entity.USERS, username=username)

    def list_users(self, *, role: Optional[str] = None) -> list[User]:
        return self._list(Entity.USERS, **_filters(role=role))

    def create_user(self, data: UserCreate) -> User:
        values = data.model_dump(exclude={"password"})
        values["password_hash"] = hash_password(data.password)
        with self.transaction():
            if self.get_user_by_username(data.username) is not None:
                raise ConflictError(f"Username {data.username!r} is already taken")
            return self._insert(Entity.USERS, values)

    def update_user(self, user_id: int, changes: UserUpdate) -> User:
        values = changes.changes()
        if "password" in values:
            values["password_hash"] = hash_password(values.pop("password"))
        with self.transaction():
            return self._update(Entity.USERS, user_id, values)

    # -------------------- cities / buildings --------------------

    def get_city(self, city_id: int) -> Optional[City]:
        return self._get(Entity.CITIES, city_id)

    def list_cities(self) -> list[City]:
        return self._list(Entity.CITIES)

    def create_city(self, data: CityCreate) -> City:
        with self.transaction():
            return self._insert(Entity.CITIES, data.model_dump())

    def update_city(self, city_id: int, changes: CityUpdate) -> City:
        with self.transaction():
            return self._update(Entity.CITIES, city_id, changes.changes())

    def get_building(self, building_id: int) -> Optional[Building]:
        return self._get(Entity.BUILDINGS, building_id)

    def list_buildings(self, *, city_id: Optional[int] = None) -> list[Building]:
        return self._list(Entity.BUILDINGS, **_filters(city_id=city_id))

    def create_building(self, data: BuildingCreate) -> Building:
        with self.transaction():
            return self._insert(Entity.BUILDINGS, data.model_dump())

    def update_building(self, building_id: int, changes: BuildingUpdate) -> Building:
        with self.transaction():
            return self._update(Entity.BUILDINGS, building_id, changes.changes())

    # -------------------- apartments --------------------

    def get_apartment(self, apartment_id: int) -> Optional[Apartment]:
        return self._get(Entity.APARTMENTS, apartment_id)

    def list_apartments(self, *, building_id: Optional[int] = None) -> list[Apartment]:
        return self._list(Entity.APARTMENTS, **_filters(building_id=building_id))

    def create_apartment(self, data: ApartmentCreate) -> Apartment:
        with self.transaction():
            return self._insert(Entity.APARTMENTS, data.model_dump())

    def update_apartment(self, apartment_id: int, changes: ApartmentUpdate) -> Apartment:
        with self.transaction():
            return self._update(Entity.APARTMENTS, apartment_id, changes.changes())

    # -------------------- tasks --------------------

    def get_task(self, task_pk: int) -> Optional[Task]:
        return self._get(Entity.TASKS, task_pk)

    def get_task_by_task_id(self, task_id: str) -> Optional[Task]:
        return self._find_one(Entity.TASKS, task_id=task_id)

    def list_tasks(
        self,
        *,
        apartment_id: Optional[int] = None,
        status: Optional[str] = None,
        type: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Task]:
        return self._list(
            Entity.TASKS,
            **_filters(apartment_id=apartment_id, status=status, type=type, assigned_to=assigned_to),
        )

    def _mark_maintained(self, apartment_id: int, reported_at: datetime) -> datetime:
        """
        Completion timestamp for a task reaching `complete`, written through to the
        apartment's lastMaintenance. Never earlier than the report time.
        """
        completed_at = max(datetime.utcnow(), reported_at)
        if self._get(Entity.APARTMENTS, apartment_id) is not None:
            self._update(Entity.APARTMENTS, apartment_id, {"last_maintenance": completed_at})
        return completed_at

    def create_task(self, data: TaskCreate) -> Task:
        values = data.model_dump()
        with self.transaction():
            if values["task_id"] is None:
                values["task_id"] = self._next_code(Entity.TASKS, "task_id", "MT", 4)
            elif self.get_task_by_task_id(values["task_id"]) is not None:
                raise ConflictError(f"Task id {values['task_id']!r} already exists")

            values["reported_at"] = values["reported_at"] or datetime.utcnow()
            values["completed_at"] = None
            values["verified_at"] = None
            if values["status"] == "complete":
                values["completed_at"] = self._mark_maintained(values["apartment_id"], values["reported_at"])
            return self._insert(Entity.TASKS, values)

    def update_task(self, task_pk: int, changes: TaskUpdate) -> Task:
        values = changes.changes()
        with self.transaction():
            task = self._require(Entity.TASKS, task_pk)
            if values.get("status") == "complete" and task.completed_at is None:
                apartment_id = values.get("apartment_id", task.apartment_id)
                values["completed_at"] = self._mark_maintained(apartment_id, task.reported_at)
            return self._update(Entity.TASKS, task_pk, values)

    def add_evidence_photos(self, task_pk: int, paths: list[str]) -> Task:
        with self.transaction():
            task = self._require(Entity.TASKS, task_pk)
            photos = list(task.evidence_photos or []) + list(paths)
            return self._update(Entity.TASKS, task_pk, {"evidence_photos": photos})

    # -------------------- materials --------------------

    def get_material(self, material_id: int) -> Optional[Material]:
        return self._get(Entity.MATERIALS, material_id)

    def list_materials(self) -> list[Material]:
        return self._list(Entity.MATERIALS)

    def create_material(self, data: MaterialCreate) -> Material:
        with self.transaction():
            return self._insert(Entity.MATERIALS, data.model_dump())

    def update_material(self, material_id: int, changes: MaterialUpdate) -> Material:
        with self.transaction():
            return self._update(Entity.MATERIALS, material_id, changes.changes())

    def get_task_material(self, task_material_id: int) -> Optional[TaskMaterial]:
        return self._get(Entity.TASK_MATERIALS, task_material_id)

    def list_task_materials(self, *, task_id: Optional[int] = None) -> list[TaskMaterial]:
        return self._list(Entity.TASK_MATERIALS, **_filters(task_id=task_id))

    def create_task_material(self, data: TaskMaterialCreate) -> TaskMaterial:
        with self.transaction():
            return self._insert(Entity.TASK_MATERIALS, data.model_dump())

    def update_task_material(self, task_material_id: int, changes: TaskMaterialUpdate) -> TaskMaterial:
        with self.transaction():
            return self._update(Entity.TASK_MATERIALS, task_material_id, changes.changes())

    # -------------------- purchasing --------------------

    def get_purchase_order(self, po_id: int) -> Optional[PurchaseOrder]:
        return self._get(Entity.PURCHASE_ORDERS, po_id)

    def list_purchase_orders(self, *, status: Optional[str] = None) -> list[PurchaseOrder]:
        return self._list(Entity.PURCHASE_ORDERS, **_filters(status=status))

    def create_purchase_order(self, data: PurchaseOrderCreate) -> PurchaseOrder:
        values = data.model_dump()
        with self.transaction():
            if values["po_number"] is None:
                values["po_number"] = self._next_code(Entity.PURCHASE_ORDERS, "po_number", "PO", 3)
            elif self._find_one(Entity.PURCHASE_ORDERS, po_number=values["po_number"]) is not None:
                raise ConflictError(f"PO number {values['po_number']!r} already exists")

            values["created_at"] = datetime.utcnow()
            values["total_amount"] = 0.0
            return self._insert(Entity.PURCHASE_ORDERS, values)

    def update_purchase_order(self, po_id: int, changes: PurchaseOrderUpdate) -> PurchaseOrder:
        with self.transaction():
            return self._update(Entity.PURCHASE_ORDERS, po_id, changes.changes())

    def list_purchase_order_items(self, *, purchase_order_id: Optional[int] = None) -> list[PurchaseOrderItem]:
        return self._list(Entity.PURCHASE_ORDER_ITEMS, **_filters(purchase_order_id=purchase_order_id))

    def create_purchase_order_item(self, data: PurchaseOrderItemCreate) -> PurchaseOrderItem:
        """
        Inserts the line with totalPrice = quantity * unitPrice and recomputes the
        order's totalAmount, in one transaction.
        """
        po_id = data.purchase_order_id
        with self.transaction():
            self._require(Entity.PURCHASE_ORDERS, po_id)

            values = data.model_dump()
            values["total_price"] = round(data.quantity * data.unit_price, 2)
            item = self._insert(Entity.PURCHASE_ORDER_ITEMS, values)

            items = self.list_purchase_order_items(purchase_order_id=po_id)
            total = round(sum(i.total_price for i in items), 2)
            self._update(Entity.PURCHASE_ORDERS, po_id, {"total_amount": total})
            return item
