from .memory_storage import InMemoryKeyValueStorage, SharedMemoryArea

__all__ = ["InMemoryKeyValueStorage", "SharedMemoryArea"]
