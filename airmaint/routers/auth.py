# airmaint/routers/auth.py
from __future__ import annotations

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..db import get_storage
from ..schemas import LoginIn, LoginOut, UserOut
from ..services.auth_service import create_access_token, decode_access_token, verify_password
from ..storage import Storage

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, request: Request, storage: Storage = Depends(get_storage)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = storage.get_user_by_username(payload.username)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(request.app.state.settings, user_id=user.id, username=user.username, role=user.role)
    return LoginOut(**user.public().model_dump(), access_token=token)


@router.get("/me", response_model=UserOut)
def me(
    request: Request,
    authorization: str | None = Header(default=None),
    storage: Storage = Depends(get_storage),
):
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        claims = decode_access_token(request.app.state.settings, token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = storage.get_user(int(claims.get("uid") or 0))
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user.public()
