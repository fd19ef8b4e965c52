from .base import Base
from .session import create_session_factory, create_storage_engine, init_schema
from .models import StorageEntryModel

__all__ = [
    "Base",
    "create_session_factory",
    "create_storage_engine",
    "init_schema",
    "StorageEntryModel",
]
