"""Backup codec: snapshot export, structural/version validation, and restore.

Two restore strategies are supported:

* **replace**: every known collection is set from the snapshot, or emptied
  when the snapshot lacks it. Afterwards no collection holds data the snapshot
  did not provide.
* **merge**: collections present in the snapshot are unioned with the
  current data; snapshot records win on conflict except where noted
  (passwords, newer newsletter subscriptions, newer log entries).

Both strategies finish by recording one ``import`` activity-log entry.
"""

import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from edgestore.application.schemas import (
    RECORD_MODELS,
    ActivityLogEntry,
    BackupMetadata,
    BackupValidationResult,
    ImportStrategy,
    NewsletterSubscriber,
    RecordModel,
    Snapshot,
    User,
)
from edgestore.domain.entities import (
    ACTIVITY_LOGS,
    ALL_COLLECTIONS,
    APPLICATIONS,
    CONTACTS,
    CONTENT_COLLECTIONS,
    NEWSLETTER,
    USERS,
    ActivityAction,
    CollectionSpec,
    EntityType,
)
from edgestore.domain.exceptions import InvalidBackupError
from edgestore.domain.identifiers import new_record_id, parse_iso, to_iso, utc_now
from edgestore.infrastructure.logging.colored_logger import OperationLogger, OperationStage

from .activity_logger import ActivityLogger
from .persistent_store import PersistentStore

logger = logging.getLogger(__name__)
olog = OperationLogger("BackupService")

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")

# Fields that must be present in every backup file.
REQUIRED_FIELDS = (
    "services",
    "team",
    "testimonials",
    "jobs",
    "users",
    "contacts",
    "newsletter",
    "applications",
    "exportedAt",
)

# Fields that, when present, must hold a list of records.
ARRAY_FIELDS = tuple(spec.name for spec in ALL_COLLECTIONS)


def parse_version(value: Any) -> tuple[int, int, int] | None:
    """Parse ``major.minor.patch`` from the start of ``value``."""
    match = _VERSION_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


class BackupService:
    """Exports, validates and restores whole-store snapshots."""

    def __init__(
        self,
        store: PersistentStore,
        activity: ActivityLogger,
        *,
        format_version: str = "1.0.0",
        app_version: str = "0.1.0",
        now: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._activity = activity
        self._format_version = format_version
        self._app_version = app_version
        self._now = now
        self._adapters: dict[str, TypeAdapter] = {}

    @property
    def format_version(self) -> str:
        return self._format_version

    # ── Export ──────────────────────────────────────────────────────

    def export_all(self, description: str | None = None) -> Snapshot:
        """Capture every collection plus the activity log."""
        with olog.timed_step(OperationStage.EXPORT, "Exporting snapshot"):
            collections = {
                spec.name: self._read(spec) for spec in ALL_COLLECTIONS
            }
            snapshot = Snapshot(
                version=self._format_version,
                app_version=self._app_version,
                backup_id=new_record_id("backup"),
                description=description,
                services=collections["services"],
                team=collections["team"],
                testimonials=collections["testimonials"],
                jobs=collections["jobs"],
                users=collections["users"],
                contacts=collections["contacts"],
                newsletter=collections["newsletter"],
                applications=collections["applications"],
                activity_logs=collections["activityLogs"],
                exported_at=to_iso(self._now()),
            )
            olog.stats(**{name: len(records) for name, records in collections.items()})
        return snapshot

    def export_json(self, description: str | None = None) -> str:
        """Export as an indented JSON document in the wire shape."""
        return self.export_all(description).model_dump_json(
            by_alias=True, exclude_none=True, indent=2
        )

    def backup_filename(self, moment: datetime | None = None) -> str:
        moment = moment or self._now()
        return f"edgemakers-backup-{moment:%Y-%m-%d_%H-%M-%S}.json"

    # ── Validation ──────────────────────────────────────────────────

    def validate(self, data: Any) -> BackupValidationResult:
        """Check structure and format-version compatibility. Never raises."""
        olog.step_start(OperationStage.VALIDATE, "Validating backup")
        try:
            result = self._validate(data)
        except Exception as exc:
            olog.step_error(OperationStage.VALIDATE, "Validation crashed", error=exc)
            return BackupValidationResult(is_valid=False, errors=["Invalid backup file format"])

        if result.is_valid:
            olog.step_complete(
                OperationStage.VALIDATE, "Backup is valid", warnings=len(result.warnings)
            )
        else:
            olog.step_warning(
                OperationStage.VALIDATE, "Backup is invalid", errors=len(result.errors)
            )
        return result

    def _validate(self, data: Any) -> BackupValidationResult:
        if not isinstance(data, Mapping):
            return BackupValidationResult(is_valid=False, errors=["Invalid backup file format"])

        errors: list[str] = []
        warnings: list[str] = []

        for field in REQUIRED_FIELDS:
            if field not in data:
                errors.append(f"Missing required field: {field}")

        version = data.get("version")
        if version:
            backup_version = parse_version(version)
            current_version = parse_version(self._format_version)
            if backup_version and current_version:
                if backup_version[0] != current_version[0]:
                    errors.append(
                        f"Incompatible backup format version: {version} "
                        f"(current: {self._format_version}). Major version mismatch."
                    )
                elif backup_version[1:] != current_version[1:]:
                    warnings.append(
                        f"Backup version ({version}) differs from current version "
                        f"({self._format_version})"
                    )
            else:
                warnings.append(f"Unable to parse version information: {version}")
        else:
            warnings.append(
                "Backup does not include version information (limited compatibility)"
            )

        for field in ARRAY_FIELDS:
            value = data.get(field)
            if value is not None and not isinstance(value, list):
                errors.append(f"Invalid data type for {field}: expected array")

        services = data.get("services")
        if isinstance(services, list):
            for index, item in enumerate(services):
                if not isinstance(item, Mapping) or not item.get("id") or not item.get("title"):
                    errors.append(f"Invalid service structure at index {index}")

        if errors:
            return BackupValidationResult(is_valid=False, errors=errors, warnings=warnings)

        record_counts = {
            field: len(data[field]) if isinstance(data.get(field), list) else 0
            for field in ARRAY_FIELDS
        }
        return BackupValidationResult(
            is_valid=True,
            warnings=warnings,
            metadata=BackupMetadata(
                version=str(version or "unknown"),
                app_version=str(data.get("appVersion") or "unknown"),
                exported_at=data.get("exportedAt"),
                record_counts=record_counts,
            ),
        )

    # ── Import ──────────────────────────────────────────────────────

    def import_snapshot(self, data: Snapshot | Mapping[str, Any], strategy: ImportStrategy) -> None:
        if ImportStrategy(strategy) is ImportStrategy.MERGE:
            self.import_merge(data)
        else:
            self.import_replace(data)

    def import_replace(self, data: Snapshot | Mapping[str, Any]) -> None:
        """Make every collection exactly equal to the snapshot (absent ⇒ empty)."""
        incoming = self._parse(data)
        with olog.timed_step(OperationStage.IMPORT, "Replacing all collections"):
            for spec in ALL_COLLECTIONS:
                records = incoming.get(spec.name) or []
                self._store.set_collection(spec.storage_key, records, spec.topic)
                olog.detail(f"{spec.name}: {len(records)} records")

        self._activity.log(ActivityAction.IMPORT, EntityType.BACKUP, "restore", "Full Restore")

    def import_merge(self, data: Snapshot | Mapping[str, Any]) -> None:
        """Union the snapshot with current data; absent collections are untouched."""
        incoming = self._parse(data)
        with olog.timed_step(OperationStage.IMPORT, "Merging backup into current data"):
            for spec in CONTENT_COLLECTIONS:
                if spec.name in incoming:
                    merged = merge_by_id(self._read(spec), incoming[spec.name])
                    self._write(spec, merged)

            if USERS.name in incoming:
                existing = self._read(USERS)
                self._write(USERS, merge_users(existing, incoming[USERS.name]))

            for spec in (CONTACTS, APPLICATIONS):
                if spec.name in incoming:
                    self._write(spec, dedupe_by_id(self._read(spec), incoming[spec.name]))

            if NEWSLETTER.name in incoming:
                existing = self._read(NEWSLETTER)
                self._write(NEWSLETTER, merge_subscribers(existing, incoming[NEWSLETTER.name]))

            if ACTIVITY_LOGS.name in incoming:
                existing = self._read(ACTIVITY_LOGS)
                self._write(ACTIVITY_LOGS, merge_activity_logs(existing, incoming[ACTIVITY_LOGS.name]))

        self._activity.log(ActivityAction.IMPORT, EntityType.BACKUP, "merge", "Merge Restore")

    # ── Helpers ─────────────────────────────────────────────────────

    def _parse(self, data: Snapshot | Mapping[str, Any]) -> dict[str, list[RecordModel]]:
        """Parse every collection present in ``data`` before anything is written."""
        if isinstance(data, Snapshot):
            data = data.to_document()
        if not isinstance(data, Mapping):
            raise InvalidBackupError("expected a JSON object")

        parsed: dict[str, list[RecordModel]] = {}
        for spec in ALL_COLLECTIONS:
            value = data.get(spec.name)
            if value is None:
                continue
            try:
                parsed[spec.name] = self._adapter(spec).validate_python(value)
            except ValidationError as exc:
                raise InvalidBackupError(
                    f"{spec.name}: {exc.error_count()} invalid record(s)"
                ) from exc
        return parsed

    def _adapter(self, spec: CollectionSpec) -> TypeAdapter:
        adapter = self._adapters.get(spec.name)
        if adapter is None:
            model, _ = RECORD_MODELS[spec.name]
            adapter = TypeAdapter(list[model])
            self._adapters[spec.name] = adapter
        return adapter

    def _read(self, spec: CollectionSpec) -> list[Any]:
        model, _ = RECORD_MODELS[spec.name]
        return self._store.get_collection(spec.storage_key, model)

    def _write(self, spec: CollectionSpec, records: list[Any]) -> None:
        self._store.set_collection(spec.storage_key, records, spec.topic)
        olog.detail(f"{spec.name}: {len(records)} records after merge")


# ── Merge rules ──────────────────────────────────────────────────────


def merge_by_id(existing: list[RecordModel], backup: list[RecordModel]) -> list[RecordModel]:
    """Backup records in backup order, then existing records the backup lacks."""
    # An id repeated inside the backup keeps one record: the last occurrence,
    # placed where the id first appeared
    by_id: dict[str, RecordModel] = {record.id: record for record in backup}
    result = list(by_id.values())
    result.extend(record for record in existing if record.id not in by_id)
    return result


def merge_users(existing: list[User], backup: list[User]) -> list[User]:
    """Merge by id, never regressing a stored password hash."""
    passwords = {user.id: user.password for user in existing if user.password}
    merged = []
    for user in merge_by_id(existing, backup):
        password = passwords.get(user.id)
        if password and user.password != password:
            user = user.model_copy(update={"password": password})
        merged.append(user)
    return merged


def dedupe_by_id(existing: list[RecordModel], backup: list[RecordModel]) -> list[RecordModel]:
    """Existing first, backup entries override existing entries with the same id."""
    by_id: dict[str, RecordModel] = {record.id: record for record in existing}
    for record in backup:
        by_id[record.id] = record
    return list(by_id.values())


def _is_newer(candidate: str | None, current: str | None) -> bool:
    candidate_at = parse_iso(candidate)
    current_at = parse_iso(current)
    return candidate_at is not None and current_at is not None and candidate_at > current_at


def merge_subscribers(
    existing: list[NewsletterSubscriber], backup: list[NewsletterSubscriber]
) -> list[NewsletterSubscriber]:
    """Dedupe by lowercased e-mail/WhatsApp, keeping the most recent subscription."""
    by_key: dict[str, NewsletterSubscriber] = {}
    for subscriber in existing:
        by_key[subscriber.dedupe_key] = subscriber
    for subscriber in backup:
        current = by_key.get(subscriber.dedupe_key)
        if current is None or _is_newer(subscriber.subscribed_at, current.subscribed_at):
            by_key[subscriber.dedupe_key] = subscriber
    return list(by_key.values())


def merge_activity_logs(
    existing: list[ActivityLogEntry], backup: list[ActivityLogEntry]
) -> list[ActivityLogEntry]:
    """Merge by id, keeping whichever of two same-id entries is newer."""
    by_id: dict[str, ActivityLogEntry] = {entry.id: entry for entry in existing}
    for entry in backup:
        current = by_id.get(entry.id)
        if current is None or _is_newer(entry.timestamp, current.timestamp):
            by_id[entry.id] = entry
    return list(by_id.values())
