from .activity import ActivityAction, EntityType
from .collection import (
    ACTIVITY_LOGS,
    ALL_COLLECTIONS,
    APPLICATIONS,
    CONTACTS,
    CONTENT_COLLECTIONS,
    JOBS,
    LEGACY_KEY_MAPPINGS,
    NEWSLETTER,
    SERVICES,
    SETTINGS_STORAGE_KEY,
    SUBMISSION_COLLECTIONS,
    TEAM,
    TESTIMONIALS,
    USERS,
    CollectionSpec,
    collection_by_name,
    collection_for_key,
)
from .migration import MigrationReport
from .quota import EvictionReport, QuotaErrorInfo, QuotaState
from .topic import Topic
from .write_result import WriteFailed, WriteOk, WriteQuotaExceeded, WriteResult

__all__ = [
    "ActivityAction",
    "EntityType",
    "CollectionSpec",
    "SERVICES",
    "TEAM",
    "TESTIMONIALS",
    "JOBS",
    "USERS",
    "CONTACTS",
    "NEWSLETTER",
    "APPLICATIONS",
    "ACTIVITY_LOGS",
    "SETTINGS_STORAGE_KEY",
    "CONTENT_COLLECTIONS",
    "SUBMISSION_COLLECTIONS",
    "ALL_COLLECTIONS",
    "LEGACY_KEY_MAPPINGS",
    "collection_by_name",
    "collection_for_key",
    "MigrationReport",
    "EvictionReport",
    "QuotaErrorInfo",
    "QuotaState",
    "Topic",
    "WriteFailed",
    "WriteOk",
    "WriteQuotaExceeded",
    "WriteResult",
]
