from .activity_logger import ActivityLogger
from .backup_service import BackupService
from .collection_repository import CollectionRepository
from .eviction_policy import EvictionPolicy
from .legacy_migrator import LegacyMigrator
from .notification_bus import NotificationBus
from .persistent_store import PersistentStore
from .quota_monitor import QuotaMonitor
from .site_database import SiteDatabase
from .size_estimator import StorageSizeEstimator
from .storage_sync import StorageSync
from .submission_service import RecentSubmission, SubmissionService

__all__ = [
    "ActivityLogger",
    "BackupService",
    "CollectionRepository",
    "EvictionPolicy",
    "LegacyMigrator",
    "NotificationBus",
    "PersistentStore",
    "QuotaMonitor",
    "SiteDatabase",
    "StorageSizeEstimator",
    "StorageSync",
    "RecentSubmission",
    "SubmissionService",
]
