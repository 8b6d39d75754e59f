# airmaint/services/auth_service.py
from __future__ import annotations

import base64
import hashlib
import hmac
import os
import secrets
from datetime import datetime, timedelta
from typing import Any

import jwt

from ..config import Settings


def _now() -> datetime:
    return datetime.utcnow()


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    iters = int(os.getenv("AUTH_PBKDF2_ITERS", "210000"))
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iters)
    return f"pbkdf2_sha256${iters}${base64.b64encode(salt).decode()}${base64.b64encode(dk).decode()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algo, iters_s, salt_b64, dk_b64 = stored.split("$", 3)
    except ValueError:
        return False
    if algo != "pbkdf2_sha256":
        return False
    salt = base64.b64decode(salt_b64.encode())
    dk = base64.b64decode(dk_b64.encode())
    test = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, int(iters_s))
    return hmac.compare_digest(test, dk)


def create_access_token(settings: Settings, *, user_id: int, username: str, role: str) -> str:
    now = _now()
    payload: dict[str, Any] = {
        "sub": username,
        "uid": int(user_id),
        "role": str(role),
        "iat": now,
        "exp": now + timedelta(minutes=int(settings.jwt_exp_minutes)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_access_token(settings: Settings, token: str) -> dict[str, Any]:
    """Raises jwt.InvalidTokenError (expired, bad signature, malformed)."""
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
