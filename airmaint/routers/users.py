# airmaint/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_storage
from ..schemas import UserCreate, UserOut, UserRole, UserUpdate
from ..storage import Storage

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
def list_users(storage: Storage = Depends(get_storage)):
    return [u.public() for u in storage.list_users()]


@router.get("/role/{role}", response_model=list[UserOut])
def list_users_by_role(role: UserRole, storage: Storage = Depends(get_storage)):
    return [u.public() for u in storage.list_users(role=role)]


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, storage: Storage = Depends(get_storage)):
    return storage.create_user(payload).public()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user.public()


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_user(user_id, payload).public()
