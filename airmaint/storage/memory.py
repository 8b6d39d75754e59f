# airmaint/storage/memory.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import BaseModel

from .base import RECORD_TYPES, Entity, LABELS, NotFoundError, Storage


class _Table:
    def __init__(self) -> None:
        self.rows: dict[int, BaseModel] = {}
        self.next_id = 1


class MemStorage(Storage):
    """
    Dict-per-entity store with per-entity counters. Ids are never reused.

    Sync handlers run in a threadpool, so every primitive holds one re-entrant
    lock, and transaction() holds it for the whole unit: uniqueness checks, code
    generation and the completion cascade cannot interleave with other writers.
    Nothing is rolled back; multi-step writes check their preconditions before
    the first write.
    """

    backend = "memory"

    def __init__(self, *, seed: bool = False) -> None:
        self._lock = threading.RLock()
        self._tables: dict[Entity, _Table] = {e: _Table() for e in Entity}
        if seed:
            from ..seed.demo_data import seed_demo

            seed_demo(self)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    def _get(self, entity: Entity, record_id: int) -> Optional[BaseModel]:
        with self._lock:
            return self._tables[entity].rows.get(record_id)

    def _list(self, entity: Entity, **filters: Any) -> list[BaseModel]:
        with self._lock:
            rows = list(self._tables[entity].rows.values())
        return [row for row in rows if all(getattr(row, k) == v for k, v in filters.items())]

    def _count(self, entity: Entity) -> int:
        with self._lock:
            return len(self._tables[entity].rows)

    def _insert(self, entity: Entity, values: dict[str, Any]) -> BaseModel:
        with self._lock:
            table = self._tables[entity]
            record_id = table.next_id
            row = RECORD_TYPES[entity].model_validate({**values, "id": record_id})
            table.rows[record_id] = row
            table.next_id += 1
            return row

    def _update(self, entity: Entity, record_id: int, values: dict[str, Any]) -> BaseModel:
        with self._lock:
            table = self._tables[entity]
            row = table.rows.get(record_id)
            if row is None:
                raise NotFoundError(f"{LABELS[entity]} with id {record_id} not found")
            merged = row.model_copy(update=values)
            table.rows[record_id] = merged
            return merged

    def _max_id(self, entity: Entity) -> int:
        with self._lock:
            return self._tables[entity].next_id - 1
