# airmaint/routers/tasks.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile

from ..db import get_storage
from ..schemas import (
    TaskCreate,
    TaskMaterialCreate,
    TaskMaterialIn,
    TaskMaterialView,
    TaskStatus,
    TaskType,
    TaskUpdate,
    TaskView,
)
from ..services.evidence import save_evidence_photos
from ..services.expansion import expand_task, expand_task_material
from ..storage import Storage

log = logging.getLogger("airmaint.tasks")

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _get_task_or_404(storage: Storage, task_pk: int):
    task = storage.get_task(task_pk)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("", response_model=list[TaskView])
def list_tasks(
    apartment_id: int | None = Query(default=None, alias="apartmentId"),
    status: TaskStatus | None = Query(default=None),
    type: TaskType | None = Query(default=None),
    assigned_to: int | None = Query(default=None, alias="assignedTo"),
    storage: Storage = Depends(get_storage),
):
    tasks = storage.list_tasks(apartment_id=apartment_id, status=status, type=type, assigned_to=assigned_to)
    return [expand_task(storage, t) for t in tasks]


@router.get("/{task_pk}", response_model=TaskView)
def get_task(task_pk: int, storage: Storage = Depends(get_storage)):
    return expand_task(storage, _get_task_or_404(storage, task_pk))


@router.post("", response_model=TaskView, status_code=201)
def create_task(payload: TaskCreate, storage: Storage = Depends(get_storage)):
    task = storage.create_task(payload)
    log.info("task created", extra={"task_id": task.task_id, "apartment_id": task.apartment_id})
    return expand_task(storage, task)


@router.patch("/{task_pk}", response_model=TaskView)
def update_task(task_pk: int, payload: TaskUpdate, storage: Storage = Depends(get_storage)):
    before = _get_task_or_404(storage, task_pk)
    task = storage.update_task(task_pk, payload)
    if before.completed_at is None and task.completed_at is not None:
        log.info(
            "task completed",
            extra={"task_id": task.task_id, "apartment_id": task.apartment_id},
        )
    return expand_task(storage, task)


@router.post("/{task_pk}/evidence", response_model=TaskView)
def upload_evidence(
    task_pk: int,
    request: Request,
    photos: list[UploadFile] | None = File(default=None),
    storage: Storage = Depends(get_storage),
):
    _get_task_or_404(storage, task_pk)
    settings = request.app.state.settings
    paths = save_evidence_photos(
        photos or [],
        upload_dir=settings.upload_dir,
        max_bytes=settings.upload_max_bytes,
        max_files=settings.upload_max_files,
    )
    return expand_task(storage, storage.add_evidence_photos(task_pk, paths))


@router.get("/{task_pk}/materials", response_model=list[TaskMaterialView])
def list_task_materials(task_pk: int, storage: Storage = Depends(get_storage)):
    _get_task_or_404(storage, task_pk)
    return [expand_task_material(storage, tm) for tm in storage.list_task_materials(task_id=task_pk)]


@router.post("/{task_pk}/materials", response_model=TaskMaterialView, status_code=201)
def add_task_material(task_pk: int, payload: TaskMaterialIn, storage: Storage = Depends(get_storage)):
    _get_task_or_404(storage, task_pk)
    if storage.get_material(payload.material_id) is None:
        raise HTTPException(status_code=404, detail="Material not found")
    tm = storage.create_task_material(TaskMaterialCreate(**payload.model_dump(), task_id=task_pk))
    return expand_task_material(storage, tm)
