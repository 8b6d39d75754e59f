# airmaint/schemas.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _naive_utc(v: datetime) -> datetime:
    # stored timestamps are naive UTC, matching datetime.utcnow()
    if v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


UtcDateTime = Annotated[datetime, AfterValidator(_naive_utc)]

UserRole = Literal["control_center", "maintenance_agent", "purchasing_agent"]
ApartmentStatus = Literal["active", "maintenance", "inactive"]
TaskType = Literal["corrective", "preventive"]
TaskPriority = Literal["low", "medium", "high"]
TaskStatus = Literal["pending", "in_progress", "scheduled", "complete", "verified"]
TaskMaterialStatus = Literal["needed", "ordered", "received"]
PurchaseOrderStatus = Literal["draft", "submitted", "received"]

PENDING_LIKE_STATUSES = ("pending", "in_progress", "scheduled")


class CamelModel(BaseModel):
    """
    Wire format is camelCase (what the UI binds to); snake_case is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UpdateModel(CamelModel):
    """
    PATCH bodies. Only fields the client actually sent are applied.

    Fields typed without Optional are non-nullable: omitting them leaves the stored
    value unchanged, an explicit null is rejected.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# -------------------- Users --------------------

class UserOut(CamelModel):
    id: int
    username: str
    name: str
    role: UserRole
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None


class User(UserOut):
    # stored record; never returned as-is
    password_hash: str

    def public(self) -> UserOut:
        return UserOut.model_validate(self.model_dump(exclude={"password_hash"}))


class UserCreate(CamelModel):
    username: str = Field(min_length=1, max_length=80)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: UserRole
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None


class UserUpdate(UpdateModel):
    password: str = Field(default=None, min_length=1)
    name: str = None
    role: UserRole = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None


class LoginIn(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginOut(UserOut):
    access_token: str
    token_type: str = "bearer"


# -------------------- Locations --------------------

class CityCreate(CamelModel):
    name: str = Field(min_length=1)
    state: str
    country: str = "Mexico"


class City(CityCreate):
    id: int


class CityUpdate(UpdateModel):
    name: str = None
    state: str = None
    country: str = None


class BuildingCreate(CamelModel):
    name: str = Field(min_length=1)
    address: str
    city_id: int
    total_units: int = Field(ge=0)


class Building(BuildingCreate):
    id: int


class BuildingUpdate(UpdateModel):
    name: str = None
    address: str = None
    city_id: int = None
    total_units: int = Field(default=None, ge=0)


class ApartmentCreate(CamelModel):
    apartment_number: str = Field(min_length=1)
    building_id: int
    status: ApartmentStatus = "active"
    last_maintenance: Optional[UtcDateTime] = None
    next_maintenance: Optional[UtcDateTime] = None
    bedroom_count: int = Field(ge=0)
    bathroom_count: int = Field(ge=0)
    square_meters: Optional[float] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None


class Apartment(ApartmentCreate):
    id: int


class ApartmentUpdate(UpdateModel):
    apartment_number: str = None
    building_id: int = None
    status: ApartmentStatus = None
    last_maintenance: Optional[UtcDateTime] = None
    next_maintenance: Optional[UtcDateTime] = None
    bedroom_count: int = Field(default=None, ge=0)
    bathroom_count: int = Field(default=None, ge=0)
    square_meters: Optional[float] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None


# -------------------- Tasks --------------------

class TaskCreate(CamelModel):
    task_id: Optional[str] = Field(default=None, pattern=r"^MT-\d{4,}$")
    type: TaskType
    apartment_id: int
    issue: str = Field(min_length=1)
    description: Optional[str] = None
    reported_by: Optional[str] = None
    reported_at: Optional[UtcDateTime] = None
    scheduled_for: Optional[UtcDateTime] = None
    assigned_to: Optional[int] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    estimated_duration: Optional[str] = None
    verified_by: Optional[int] = None
    evidence_photos: List[str] = Field(default_factory=list)


class Task(CamelModel):
    id: int
    task_id: str
    type: TaskType
    apartment_id: int
    issue: str
    description: Optional[str] = None
    reported_by: Optional[str] = None
    reported_at: datetime
    scheduled_for: Optional[UtcDateTime] = None
    assigned_to: Optional[int] = None
    priority: TaskPriority
    status: TaskStatus
    estimated_duration: Optional[str] = None
    completed_at: Optional[UtcDateTime] = None
    verified_by: Optional[int] = None
    verified_at: Optional[UtcDateTime] = None
    evidence_photos: List[str] = Field(default_factory=list)


class TaskUpdate(UpdateModel):
    type: TaskType = None
    apartment_id: int = None
    issue: str = None
    description: Optional[str] = None
    reported_by: Optional[str] = None
    scheduled_for: Optional[UtcDateTime] = None
    assigned_to: Optional[int] = None
    priority: TaskPriority = None
    status: TaskStatus = None
    estimated_duration: Optional[str] = None
    verified_by: Optional[int] = None
    verified_at: Optional[UtcDateTime] = None
    evidence_photos: List[str] = None


# -------------------- Materials --------------------

class MaterialCreate(CamelModel):
    name: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)
    unit: str
    notes: Optional[str] = None


class Material(MaterialCreate):
    id: int


class MaterialUpdate(UpdateModel):
    name: str = None
    quantity: int = Field(default=None, ge=0)
    unit: str = None
    notes: Optional[str] = None


class TaskMaterialIn(CamelModel):
    material_id: int
    quantity: int = Field(gt=0)
    status: TaskMaterialStatus = "needed"


class TaskMaterialCreate(TaskMaterialIn):
    task_id: int


class TaskMaterial(TaskMaterialCreate):
    id: int


class TaskMaterialUpdate(UpdateModel):
    material_id: int = None
    quantity: int = Field(default=None, gt=0)
    status: TaskMaterialStatus = None


# -------------------- Purchasing --------------------

class PurchaseOrderCreate(CamelModel):
    po_number: Optional[str] = Field(default=None, min_length=1)
    created_by: int
    status: PurchaseOrderStatus = "draft"
    notes: Optional[str] = None


class PurchaseOrder(CamelModel):
    id: int
    po_number: str
    created_by: int
    created_at: datetime
    status: PurchaseOrderStatus
    total_amount: float = 0.0
    notes: Optional[str] = None


class PurchaseOrderUpdate(UpdateModel):
    status: PurchaseOrderStatus = None
    notes: Optional[str] = None


class PurchaseOrderItemIn(CamelModel):
    material_id: int
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)


class PurchaseOrderItemCreate(PurchaseOrderItemIn):
    purchase_order_id: int


class PurchaseOrderItem(PurchaseOrderItemCreate):
    id: int
    total_price: float


# -------------------- Composed views --------------------

class ApartmentView(Apartment):
    building: Optional[Building] = None
    city: Optional[City] = None


class ApartmentDetail(ApartmentView):
    tasks: List[Task] = Field(default_factory=list)


class TaskMaterialView(TaskMaterial):
    material: Optional[Material] = None


class TaskView(Task):
    apartment: Optional[Apartment] = None
    building: Optional[Building] = None
    city: Optional[City] = None
    assigned_user: Optional[UserOut] = None
    materials: List[TaskMaterialView] = Field(default_factory=list)


class PurchaseOrderItemView(PurchaseOrderItem):
    material: Optional[Material] = None


class PurchaseOrderView(PurchaseOrder):
    created_by_user: Optional[UserOut] = None
    items: List[PurchaseOrderItemView] = Field(default_factory=list)


class TasksByStatus(CamelModel):
    pending: int = 0
    in_progress: int = 0
    scheduled: int = 0
    complete: int = 0
    verified: int = 0


class CityTaskCount(CamelModel):
    id: int
    name: str
    count: int = 0


class RecentApartment(ApartmentView):
    recent_task: Optional[Task] = None


class DashboardStats(CamelModel):
    pending_tasks: int
    corrective_tasks: int
    preventive_tasks: int
    active_apartments: int
    tasks_by_status: TasksByStatus
    tasks_by_city: List[CityTaskCount]
    recent_tasks: List[TaskView]
    recent_apartments: List[RecentApartment]
