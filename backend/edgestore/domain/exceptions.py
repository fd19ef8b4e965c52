"""Domain-specific exceptions — framework-independent."""

from edgestore.domain.entities.quota import QuotaErrorInfo


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class StorageFullError(Exception):
    """Raised by a host storage adapter when it refuses a write for capacity.

    Host-agnostic: the in-memory area and the SQLAlchemy table both raise it.
    """

    def __init__(self, key: str, required_bytes: int, capacity_bytes: int):
        self.key = key
        self.required_bytes = required_bytes
        self.capacity_bytes = capacity_bytes
        super().__init__(
            f"Cannot store '{key}': {required_bytes} bytes required, "
            f"capacity is {capacity_bytes} bytes"
        )


class StorageQuotaError(Exception):
    """Raised when a write still fails after eviction and one retry."""

    def __init__(self, message: str, info: QuotaErrorInfo):
        self.info = info
        super().__init__(
            f"Storage quota exceeded. Using {info.usage_percentage:.1f}% "
            f"({info.usage_bytes} bytes of {info.quota_bytes} bytes). {message}"
        )


class InvalidBackupError(Exception):
    """Raised when an import payload cannot be turned into collections."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid backup payload: {reason}")


class MigrationError(Exception):
    """Raised when a single legacy key cannot be migrated."""

    def __init__(self, legacy_key: str, new_key: str, reason: str):
        self.legacy_key = legacy_key
        self.new_key = new_key
        super().__init__(f"Failed to migrate {legacy_key} -> {new_key}: {reason}")
