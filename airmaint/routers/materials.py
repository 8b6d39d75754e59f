# airmaint/routers/materials.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_storage
from ..schemas import Material, MaterialCreate, MaterialUpdate, TaskMaterialUpdate, TaskMaterialView
from ..services.expansion import expand_task_material
from ..storage import Storage

router = APIRouter(tags=["materials"])


@router.get("/materials", response_model=list[Material])
def list_materials(storage: Storage = Depends(get_storage)):
    return storage.list_materials()


@router.post("/materials", response_model=Material, status_code=201)
def create_material(payload: MaterialCreate, storage: Storage = Depends(get_storage)):
    return storage.create_material(payload)


@router.get("/materials/{material_id}", response_model=Material)
def get_material(material_id: int, storage: Storage = Depends(get_storage)):
    material = storage.get_material(material_id)
    if material is None:
        raise HTTPException(status_code=404, detail="Material not found")
    return material


@router.patch("/materials/{material_id}", response_model=Material)
def update_material(material_id: int, payload: MaterialUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_material(material_id, payload)


@router.patch("/task-materials/{task_material_id}", response_model=TaskMaterialView)
def update_task_material(
    task_material_id: int,
    payload: TaskMaterialUpdate,
    storage: Storage = Depends(get_storage),
):
    return expand_task_material(storage, storage.update_task_material(task_material_id, payload))
