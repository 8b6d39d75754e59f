# airmaint/storage/sql.py
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models as orm
from ..db import Base, make_engine, make_sessionmaker
from .base import RECORD_TYPES, Entity, LABELS, ConflictError, NotFoundError, Storage

ORM_MODELS: dict[Entity, type[Base]] = {
    Entity.USERS: orm.User,
    Entity.CITIES: orm.City,
    Entity.BUILDINGS: orm.Building,
    Entity.APARTMENTS: orm.Apartment,
    Entity.TASKS: orm.Task,
    Entity.MATERIALS: orm.Material,
    Entity.TASK_MATERIALS: orm.TaskMaterial,
    Entity.PURCHASE_ORDERS: orm.PurchaseOrder,
    Entity.PURCHASE_ORDER_ITEMS: orm.PurchaseOrderItem,
}


class SqlStorage(Storage):
    """
    SQLAlchemy-backed store (SQLite or Postgres).

    The outermost transaction() opens a Session and commits it on exit; nested
    store calls made inside it reuse that Session through a ContextVar. Any error
    rolls the whole unit back, so the task completion cascade and the purchase
    order total update are atomic here.
    """

    backend = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = make_sessionmaker(engine)
        self._current: ContextVar[Optional[Session]] = ContextVar(f"airmaint_sql_session_{id(self)}", default=None)

    @classmethod
    def connect(cls, database_url: str) -> "SqlStorage":
        engine = make_engine(database_url)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            storage = cls(engine)
            storage.create_schema()
        except Exception:
            engine.dispose()
            raise
        return storage

    def create_schema(self) -> None:
        # create-if-not-exists for all nine tables
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._current.get() is not None:
            yield
            return

        db = self._sessions()
        token = self._current.set(db)
        try:
            yield
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(str(e.orig)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            self._current.reset(token)
            db.close()

    def _db(self) -> Session:
        db = self._current.get()
        if db is None:
            raise RuntimeError("SqlStorage primitive used outside transaction()")
        return db

    @staticmethod
    def _record(entity: Entity, row: Any) -> BaseModel:
        return RECORD_TYPES[entity].model_validate(row, from_attributes=True)

    def _get(self, entity: Entity, record_id: int) -> Optional[BaseModel]:
        with self.transaction():
            row = self._db().get(ORM_MODELS[entity], record_id)
            return self._record(entity, row) if row is not None else None

    def _list(self, entity: Entity, **filters: Any) -> list[BaseModel]:
        model = ORM_MODELS[entity]
        stmt = select(model).order_by(model.id)
        for k, v in filters.items():
            stmt = stmt.where(getattr(model, k) == v)
        with self.transaction():
            return [self._record(entity, row) for row in self._db().scalars(stmt).all()]

    def _insert(self, entity: Entity, values: dict[str, Any]) -> BaseModel:
        with self.transaction():
            db = self._db()
            row = ORM_MODELS[entity](**values)
            db.add(row)
            db.flush()
            return self._record(entity, row)

    def _update(self, entity: Entity, record_id: int, values: dict[str, Any]) -> BaseModel:
        with self.transaction():
            db = self._db()
            row = db.get(ORM_MODELS[entity], record_id)
            if row is None:
                raise NotFoundError(f"{LABELS[entity]} with id {record_id} not found")
            for k, v in values.items():
                setattr(row, k, v)
            db.flush()
            return self._record(entity, row)

    def _count(self, entity: Entity) -> int:
        with self.transaction():
            return int(self._db().scalar(select(func.count()).select_from(ORM_MODELS[entity])) or 0)

    def _max_id(self, entity: Entity) -> int:
        model = ORM_MODELS[entity]
        with self.transaction():
            return int(self._db().scalar(select(func.max(model.id))) or 0)
