# airmaint/routers/cities.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db import get_storage
from ..schemas import Building, BuildingCreate, BuildingUpdate, City, CityCreate, CityUpdate
from ..storage import Storage

router = APIRouter(tags=["locations"])


@router.get("/cities", response_model=list[City])
def list_cities(storage: Storage = Depends(get_storage)):
    return storage.list_cities()


@router.post("/cities", response_model=City, status_code=201)
def create_city(payload: CityCreate, storage: Storage = Depends(get_storage)):
    return storage.create_city(payload)


@router.get("/cities/{city_id}", response_model=City)
def get_city(city_id: int, storage: Storage = Depends(get_storage)):
    city = storage.get_city(city_id)
    if city is None:
        raise HTTPException(status_code=404, detail="City not found")
    return city


@router.patch("/cities/{city_id}", response_model=City)
def update_city(city_id: int, payload: CityUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_city(city_id, payload)


@router.get("/buildings", response_model=list[Building])
def list_buildings(
    city_id: int | None = Query(default=None, alias="cityId"),
    storage: Storage = Depends(get_storage),
):
    return storage.list_buildings(city_id=city_id)


@router.post("/buildings", response_model=Building, status_code=201)
def create_building(payload: BuildingCreate, storage: Storage = Depends(get_storage)):
    return storage.create_building(payload)


@router.get("/buildings/{building_id}", response_model=Building)
def get_building(building_id: int, storage: Storage = Depends(get_storage)):
    building = storage.get_building(building_id)
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    return building


@router.patch("/buildings/{building_id}", response_model=Building)
def update_building(building_id: int, payload: BuildingUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_building(building_id, payload)
