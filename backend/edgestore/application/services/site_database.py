"""SiteDatabase — the single explicitly-constructed store shared by the app.

Wires the notification bus, size estimator, quota monitor, eviction policy,
persistent store, activity logger, per-collection repositories, backup codec,
legacy migrator and cross-instance sync over one host storage. Construct one
per process (see ``edgestore.infrastructure.dependencies.build_database``) and
inject it wherever the store is needed.
"""

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from edgestore.application.interfaces import KeyValueStorage, StorageChangeSource
from edgestore.application.schemas import (
    RECORD_MODELS,
    Contact,
    ContactUpdate,
    Job,
    JobApplication,
    JobApplicationUpdate,
    JobUpdate,
    NewsletterSubscriber,
    NewsletterSubscriberUpdate,
    Service,
    ServiceUpdate,
    StorageStatus,
    TeamMember,
    TeamMemberUpdate,
    Testimonial,
    TestimonialUpdate,
    User,
    UserUpdate,
)
from edgestore.config import Settings, get_settings
from edgestore.domain.entities import (
    ALL_COLLECTIONS,
    APPLICATIONS,
    CONTACTS,
    CONTENT_COLLECTIONS,
    JOBS,
    LEGACY_KEY_MAPPINGS,
    NEWSLETTER,
    SERVICES,
    SETTINGS_STORAGE_KEY,
    TEAM,
    TESTIMONIALS,
    USERS,
    ActivityAction,
    EntityType,
    MigrationReport,
    QuotaErrorInfo,
    Topic,
)
from edgestore.domain.exceptions import EntityNotFoundError
from edgestore.domain.identifiers import utc_now

from .activity_logger import ActivityLogger
from .backup_service import BackupService
from .collection_repository import CollectionRepository
from .eviction_policy import EvictionPolicy
from .legacy_migrator import LegacyMigrator
from .notification_bus import Listener, NotificationBus
from .persistent_store import PersistentStore
from .quota_monitor import QuotaMonitor
from .size_estimator import StorageSizeEstimator
from .storage_sync import StorageSync
from .submission_service import SubmissionService

logger = logging.getLogger(__name__)


def _application_details(application: JobApplication) -> str:
    return f"Position: {application.position}"


class SiteDatabase:
    """Facade over every collection of the site's local data store."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        change_source: StorageChangeSource | None = None,
        settings: Settings | None = None,
        current_user: Callable[[], str | None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ):
        settings = settings or get_settings()
        self._settings = settings
        self._storage = storage

        self.bus = NotificationBus()
        self.estimator = StorageSizeEstimator(
            storage,
            bytes_per_char=settings.bytes_per_char,
            cache_seconds=settings.size_cache_seconds,
            clock=clock,
        )
        self.quota = QuotaMonitor(
            self.estimator,
            self.bus,
            quota_bytes=settings.quota_bytes,
            near_capacity_percentage=settings.near_capacity_percentage,
            warning_cooldown_seconds=settings.warning_cooldown_seconds,
            clock=clock,
        )
        self.eviction = EvictionPolicy(
            storage,
            self.bus,
            self.estimator,
            fraction=settings.eviction_fraction,
            success_ratio=settings.eviction_success_ratio,
        )
        self.store = PersistentStore(storage, self.bus, self.quota, self.eviction)
        self.activity = ActivityLogger(
            self.store,
            retention_days=settings.activity_log_retention_days,
            current_user=current_user,
            now=now,
        )

        # ── Collections ─────────────────────────────────────────────
        self.services: CollectionRepository[Service, ServiceUpdate] = self._repository(SERVICES)
        self.team: CollectionRepository[TeamMember, TeamMemberUpdate] = self._repository(TEAM)
        self.testimonials: CollectionRepository[Testimonial, TestimonialUpdate] = (
            self._repository(TESTIMONIALS)
        )
        self.jobs: CollectionRepository[Job, JobUpdate] = self._repository(JOBS)
        self.users: CollectionRepository[User, UserUpdate] = self._repository(USERS)
        self.contacts: CollectionRepository[Contact, ContactUpdate] = self._repository(CONTACTS)
        self.newsletter: CollectionRepository[NewsletterSubscriber, NewsletterSubscriberUpdate] = (
            self._repository(NEWSLETTER)
        )
        self.applications: CollectionRepository[JobApplication, JobApplicationUpdate] = (
            self._repository(APPLICATIONS, describe_create=_application_details)
        )

        self.backup = BackupService(
            self.store,
            self.activity,
            format_version=settings.backup_format_version,
            app_version=settings.app_version,
            now=now,
        )
        self.submissions = SubmissionService(
            self.contacts, self.newsletter, self.applications, self.quota, now=now
        )
        self.migrator = LegacyMigrator(storage, LEGACY_KEY_MAPPINGS)
        self.sync = (
            StorageSync(change_source, self.bus, self.estimator)
            if change_source is not None
            else None
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def collections(self) -> dict[str, CollectionRepository]:
        """Every CRUD collection keyed by its snapshot field name."""
        return {
            repository.spec.name: repository
            for repository in (
                self.services,
                self.team,
                self.testimonials,
                self.jobs,
                self.users,
                self.contacts,
                self.newsletter,
                self.applications,
            )
        }

    def collection(self, name: str) -> CollectionRepository:
        repository = self.collections.get(name)
        if repository is None:
            raise EntityNotFoundError("Collection", name)
        return repository

    def _repository(self, spec, *, describe_create=None) -> CollectionRepository:
        model, _ = RECORD_MODELS[spec.name]
        return CollectionRepository(
            spec, model, self.store, self.activity, describe_create=describe_create
        )

    # ── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> MigrationReport:
        """Run the one-time legacy migration and begin cross-instance sync."""
        report = self.migrator.run()
        if report.changed:
            self.estimator.invalidate()
        if self.sync is not None:
            self.sync.start()
        logger.info(
            "Site database started (quota=%d bytes, sync=%s)",
            self.quota.quota_bytes,
            "on" if self.sync is not None else "off",
        )
        return report

    def close(self) -> None:
        if self.sync is not None:
            self.sync.stop()

    # ── Subscriptions ───────────────────────────────────────────────

    def subscribe(self, topic: Topic, listener: Listener) -> Callable[[], None]:
        return self.bus.subscribe(topic, listener)

    def subscribe_quota_errors(
        self, listener: Callable[[QuotaErrorInfo], None]
    ) -> Callable[[], None]:
        return self.store.subscribe_quota_errors(listener)

    # ── Seeding and reset ───────────────────────────────────────────

    def initialize(
        self,
        *,
        services: Sequence[Service] | None = None,
        team: Sequence[TeamMember] | None = None,
        testimonials: Sequence[Testimonial] | None = None,
        jobs: Sequence[Job] | None = None,
    ) -> list[str]:
        """Seed content collections that are currently empty. Returns the seeded names."""
        defaults = {
            SERVICES.name: services,
            TEAM.name: team,
            TESTIMONIALS.name: testimonials,
            JOBS.name: jobs,
        }
        seeded = []
        for spec in CONTENT_COLLECTIONS:
            records = defaults[spec.name]
            repository = self.collection(spec.name)
            if records is not None and not repository.all():
                repository.replace(list(records))
                seeded.append(spec.name)
        if seeded:
            logger.info("Seeded default content: %s", ", ".join(seeded))
        return seeded

    def clear_all(self) -> None:
        """Remove every stored key (including legacy keys) and notify everyone."""
        self.activity.log(ActivityAction.DELETE, EntityType.BACKUP, "clear-all", "Clear All Data")

        for spec in ALL_COLLECTIONS:
            self.store.remove(spec.storage_key)
        self.store.remove(SETTINGS_STORAGE_KEY)
        for legacy_key, _ in LEGACY_KEY_MAPPINGS:
            self.store.remove(legacy_key)
        self.estimator.invalidate()

        for spec in ALL_COLLECTIONS:
            self.bus.emit(spec.topic)
        self.bus.emit(Topic.SETTINGS)
        logger.warning("All site data cleared")

    # ── Site settings ───────────────────────────────────────────────

    def get_site_settings(self) -> dict[str, Any]:
        document = self.store.get_document(SETTINGS_STORAGE_KEY, {})
        return document if isinstance(document, dict) else {}

    def update_site_settings(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``patch`` into the settings document."""
        document = self.get_site_settings()
        document.update(patch)
        self.store.write(SETTINGS_STORAGE_KEY, document)
        self.bus.emit(Topic.SETTINGS)
        return document

    # ── Storage status ──────────────────────────────────────────────

    def storage_status(self) -> StorageStatus:
        state = self.quota.state()
        return StorageStatus(
            usage_bytes=state.usage_bytes,
            usage_percentage=state.usage_percentage,
            near_capacity=state.near_capacity,
            quota_bytes=state.quota_bytes,
        )
