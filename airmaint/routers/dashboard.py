# airmaint/routers/dashboard.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import get_storage
from ..schemas import DashboardStats
from ..services.dashboard import dashboard_stats
from ..storage import Storage

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def stats(storage: Storage = Depends(get_storage)):
    return dashboard_stats(storage)
