# tests/conftest.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from airmaint.config import Settings
from airmaint.main import create_app
from airmaint.storage import MemStorage, SqlStorage


@pytest.fixture(autouse=True)
def _fast_password_hashing(monkeypatch):
    monkeypatch.setenv("AUTH_PBKDF2_ITERS", "1000")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        app_env="local",
        database_url=None,
        data_dir=str(tmp_path / "data"),
        upload_dir=str(tmp_path / "uploads"),
        seed_memory_store=False,
        enable_debug_routes=True,
        db_retry_base_delay=0,
    )


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        yield MemStorage()
        return
    store = SqlStorage.connect(f"sqlite:///{(tmp_path / 'test.db').as_posix()}")
    try:
        yield store
    finally:
        store.dispose()


@pytest.fixture
def client(settings, storage):
    with TestClient(create_app(settings, storage)) as c:
        yield c


@pytest.fixture
def demo_client(settings):
    with TestClient(create_app(settings, MemStorage(seed=True))) as c:
        yield c
