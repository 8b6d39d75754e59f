# airmaint/routers/apartments.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db import get_storage
from ..schemas import Apartment, ApartmentCreate, ApartmentDetail, ApartmentUpdate, ApartmentView
from ..services.expansion import expand_apartment, expand_apartment_detail
from ..storage import Storage

router = APIRouter(prefix="/apartments", tags=["apartments"])


@router.get("", response_model=list[ApartmentView])
def list_apartments(
    building_id: int | None = Query(default=None, alias="buildingId"),
    storage: Storage = Depends(get_storage),
):
    return [expand_apartment(storage, a) for a in storage.list_apartments(building_id=building_id)]


@router.get("/{apartment_id}", response_model=ApartmentDetail)
def get_apartment(apartment_id: int, storage: Storage = Depends(get_storage)):
    apartment = storage.get_apartment(apartment_id)
    if apartment is None:
        raise HTTPException(status_code=404, detail="Apartment not found")
    return expand_apartment_detail(storage, apartment)


@router.post("", response_model=Apartment, status_code=201)
def create_apartment(payload: ApartmentCreate, storage: Storage = Depends(get_storage)):
    return storage.create_apartment(payload)


@router.patch("/{apartment_id}", response_model=Apartment)
def update_apartment(apartment_id: int, payload: ApartmentUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_apartment(apartment_id, payload)
