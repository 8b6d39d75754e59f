from .base import ConflictError, Entity, NotFoundError, Storage, StorageError
from .factory import build_storage
from .memory import MemStorage
from .sql import SqlStorage

__all__ = [
    "ConflictError",
    "Entity",
    "MemStorage",
    "NotFoundError",
    "SqlStorage",
    "Storage",
    "StorageError",
    "build_storage",
]
