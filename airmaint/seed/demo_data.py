# airmaint/seed/demo_data.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..schemas import (
    ApartmentCreate,
    BuildingCreate,
    CityCreate,
    MaterialCreate,
    PurchaseOrderCreate,
    PurchaseOrderItemCreate,
    TaskCreate,
    TaskMaterialCreate,
    UserCreate,
)
from ..storage.base import Storage

DEMO_PASSWORD = "password"

USERS = [
    {"username": "miguel", "name": "Miguel Rodriguez", "role": "control_center", "email": "miguel@airmaint.com"},
    {"username": "carlos", "name": "Carlos Ortiz", "role": "maintenance_agent", "email": "carlos@airmaint.com"},
    {"username": "ana", "name": "Ana Morales", "role": "maintenance_agent", "email": "ana@airmaint.com"},
    {"username": "roberto", "name": "Roberto Vega", "role": "maintenance_agent", "email": "roberto@airmaint.com"},
    {"username": "maria", "name": "Maria Jimenez", "role": "maintenance_agent", "email": "maria@airmaint.com"},
    {"username": "pedro", "name": "Pedro Sanchez", "role": "purchasing_agent", "email": "pedro@airmaint.com"},
]

CITIES = [
    {"name": "Mexico City", "state": "CDMX"},
    {"name": "Cancún", "state": "Quintana Roo"},
    {"name": "Guadalajara", "state": "Jalisco"},
    {"name": "Monterrey", "state": "Nuevo Leon"},
]

# (name, address, city index, total units)
BUILDINGS = [
    ("Torre Blanca", "Av. Reforma 123", 0, 50),
    ("Vista del Mar", "Blvd. Kukulcán 45", 1, 80),
    ("Jardines", "Av. Chapultepec 789", 2, 40),
    ("Bosques", "Paseo de los Robles 567", 3, 60),
    ("Sol y Playa", "Zona Hotelera 234", 1, 70),
]

# (number, building index, status, bedrooms, bathrooms, m2, days since last maintenance)
APARTMENTS = [
    ("203", 0, "active", 2, 2, 75.0, 30),
    ("310", 1, "active", 1, 1, 60.0, 45),
    ("512", 2, "maintenance", 3, 2, 95.0, 60),
    ("721", 3, "active", 2, 2, 80.0, None),
    ("118", 4, "active", 1, 1, 55.0, 90),
]

MATERIALS = [
    "Light bulb (LED)",
    "Water heater thermostat",
    "Paint (white, 4L)",
    "AC filter",
    "Electrical outlet",
    "Pipe sealant",
    "Connection valve",
]
MATERIAL_STOCK = [50, 5, 20, 30, 25, 10, 8]

# (task index, material index, quantity, status)
TASK_MATERIALS = [
    (0, 1, 1, "needed"),
    (0, 5, 1, "needed"),
    (0, 6, 1, "needed"),
    (1, 0, 4, "received"),
    (1, 2, 1, "received"),
    (2, 3, 1, "received"),
    (4, 0, 2, "ordered"),
    (4, 2, 1, "ordered"),
    (4, 3, 1, "ordered"),
]

# (po number, status, notes, [(material index, quantity, unit price)])
PURCHASE_ORDERS = [
    (
        "PO-001",
        "submitted",
        "Emergency order for water heater parts",
        [(1, 2, 85.5), (5, 3, 12.25), (6, 3, 14.33)],
    ),
    (
        "PO-002",
        "received",
        "Monthly supply order",
        [(0, 20, 4.75), (2, 8, 29.5), (3, 15, 16.75)],
    ),
]


@dataclass(frozen=True)
class SeedResult:
    users: int
    cities: int
    buildings: int
    apartments: int
    tasks: int
    materials: int
    purchase_orders: int


def _tasks(apartment_ids: list[int], user_ids: list[int], now: datetime) -> list[TaskCreate]:
    day = timedelta(days=1)
    return [
        TaskCreate(
            task_id="MT-2023", type="corrective", apartment_id=apartment_ids[0], issue="No hot water",
            description="Guest reported no hot water in the bathroom. Issue appeared this morning.",
            reported_by="Guest (Maria Lopez)", reported_at=now - day, assigned_to=user_ids[1],
            priority="high", status="in_progress", scheduled_for=now + day / 4,
        ),
        TaskCreate(
            task_id="MT-2022", type="preventive", apartment_id=apartment_ids[1], issue="6-month review",
            description="Regular 6-month maintenance review",
            reported_by="System", reported_at=now - 3 * day, assigned_to=user_ids[2],
            priority="medium", status="complete", scheduled_for=now - 2 * day,
        ),
        TaskCreate(
            task_id="MT-2021", type="corrective", apartment_id=apartment_ids[2], issue="Broken AC",
            description="Air conditioner is not cooling properly",
            reported_by="Staff", reported_at=now - 4 * day, assigned_to=user_ids[3],
            priority="high", status="complete", scheduled_for=now - 3 * day,
        ),
        TaskCreate(
            task_id="MT-2020", type="corrective", apartment_id=apartment_ids[3], issue="Electrical failure",
            description="Power outlets in living room not working",
            reported_by="Guest", reported_at=now - 5 * day,
            priority="high", status="pending", scheduled_for=now + day,
        ),
        TaskCreate(
            task_id="MT-2019", type="preventive", apartment_id=apartment_ids[4], issue="Annual maintenance",
            description="Annual maintenance check of all systems",
            reported_by="System", reported_at=now - 6 * day, assigned_to=user_ids[4],
            priority="low", status="scheduled", scheduled_for=now + 5 * day,
        ),
    ]


def seed_demo(storage: Storage, *, now: datetime | None = None) -> SeedResult:
    """
    Loads the demo portfolio through the public store API, so defaults, generated
    totals and the completion cascade are the same as for API-created data.
    """
    now = now or datetime.utcnow()

    user_ids = [
        storage.create_user(UserCreate(password=DEMO_PASSWORD, **u)).id
        for u in USERS
    ]
    city_ids = [storage.create_city(CityCreate(country="Mexico", **c)).id for c in CITIES]
    building_ids = [
        storage.create_building(
            BuildingCreate(name=name, address=addr, city_id=city_ids[ci], total_units=units)
        ).id
        for name, addr, ci, units in BUILDINGS
    ]
    apartment_ids = [
        storage.create_apartment(
            ApartmentCreate(
                apartment_number=num,
                building_id=building_ids[bi],
                status=status,
                bedroom_count=beds,
                bathroom_count=baths,
                square_meters=m2,
                last_maintenance=(now - timedelta(days=since)) if since is not None else None,
                next_maintenance=now + timedelta(days=180),
            )
        ).id
        for num, bi, status, beds, baths, m2, since in APARTMENTS
    ]

    task_ids = [storage.create_task(t).id for t in _tasks(apartment_ids, user_ids, now)]

    material_ids = [
        storage.create_material(MaterialCreate(name=name, quantity=qty, unit="each")).id
        for name, qty in zip(MATERIALS, MATERIAL_STOCK)
    ]

    for ti, mi, qty, status in TASK_MATERIALS:
        storage.create_task_material(
            TaskMaterialCreate(task_id=task_ids[ti], material_id=material_ids[mi], quantity=qty, status=status)
        )

    purchaser = user_ids[5]
    for po_number, status, notes, items in PURCHASE_ORDERS:
        po = storage.create_purchase_order(
            PurchaseOrderCreate(po_number=po_number, created_by=purchaser, status=status, notes=notes)
        )
        for mi, qty, price in items:
            storage.create_purchase_order_item(
                PurchaseOrderItemCreate(
                    purchase_order_id=po.id, material_id=material_ids[mi], quantity=qty, unit_price=price
                )
            )

    return SeedResult(
        users=len(user_ids),
        cities=len(city_ids),
        buildings=len(building_ids),
        apartments=len(apartment_ids),
        tasks=len(task_ids),
        materials=len(material_ids),
        purchase_orders=len(PURCHASE_ORDERS),
    )
