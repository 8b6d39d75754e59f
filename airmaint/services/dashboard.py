# airmaint/services/dashboard.py
from __future__ import annotations

from ..schemas import (
    PENDING_LIKE_STATUSES,
    CityTaskCount,
    DashboardStats,
    RecentApartment,
    Task,
    TasksByStatus,
)
from ..storage.base import Storage
from .expansion import expand_apartment, expand_task

RECENT_TASKS = 5
RECENT_APARTMENTS = 3


def _newest_first(tasks: list[Task]) -> list[Task]:
    # ties on reportedAt resolve by id, newest id first
    return sorted(tasks, key=lambda t: (t.reported_at, t.id), reverse=True)


def dashboard_stats(storage: Storage) -> DashboardStats:
    tasks = storage.list_tasks()
    apartments = storage.list_apartments()

    by_status = TasksByStatus()
    for t in tasks:
        setattr(by_status, t.status, getattr(by_status, t.status) + 1)

    # every city appears, including ones without tasks
    city_counts: dict[int, CityTaskCount] = {
        c.id: CityTaskCount(id=c.id, name=c.name, count=0) for c in storage.list_cities()
    }
    for t in tasks:
        apartment = storage.get_apartment(t.apartment_id)
        if apartment is None:
            continue
        building = storage.get_building(apartment.building_id)
        if building is not None and building.city_id in city_counts:
            city_counts[building.city_id].count += 1

    recent_tasks = [expand_task(storage, t) for t in _newest_first(tasks)[:RECENT_TASKS]]

    maintained = sorted(
        (a for a in apartments if a.last_maintenance is not None),
        key=lambda a: (a.last_maintenance, a.id),
        reverse=True,
    )[:RECENT_APARTMENTS]

    recent_apartments: list[RecentApartment] = []
    for a in maintained:
        view = expand_apartment(storage, a)
        latest = _newest_first(storage.list_tasks(apartment_id=a.id))
        recent_apartments.append(
            RecentApartment(**view.model_dump(), recent_task=latest[0] if latest else None)
        )

    return DashboardStats(
        pending_tasks=sum(1 for t in tasks if t.status in PENDING_LIKE_STATUSES),
        corrective_tasks=sum(1 for t in tasks if t.type == "corrective"),
        preventive_tasks=sum(1 for t in tasks if t.type == "preventive"),
        active_apartments=sum(1 for a in apartments if a.status == "active"),
        tasks_by_status=by_status,
        tasks_by_city=list(city_counts.values()),
        recent_tasks=recent_tasks,
        recent_apartments=recent_apartments,
    )
