from .key_value_storage import KeyValueStorage
from .storage_change_source import StorageChangeListener, StorageChangeSource

__all__ = [
    "KeyValueStorage",
    "StorageChangeListener",
    "StorageChangeSource",
]
