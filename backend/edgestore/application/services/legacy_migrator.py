"""One-time relocation of data written under pre-centralization storage keys."""

import json
import logging
from collections.abc import Sequence

from edgestore.application.interfaces import KeyValueStorage
from edgestore.domain.entities import LEGACY_KEY_MAPPINGS, MigrationReport
from edgestore.domain.exceptions import MigrationError
from edgestore.infrastructure.logging.colored_logger import OperationLogger, OperationStage

logger = logging.getLogger(__name__)
olog = OperationLogger("LegacyMigrator")

# Stored values that count as "nothing there yet" for the destination key
EMPTY_VALUES = frozenset({"", "[]", "{}"})


class LegacyMigrator:
    """Moves legacy values to their new keys when the new key is still empty.

    Safe to run on every start: once a legacy key has been migrated it is
    removed, and a populated destination is never overwritten.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        mappings: Sequence[tuple[str, str]] = LEGACY_KEY_MAPPINGS,
    ):
        self._storage = storage
        self._mappings = tuple(mappings)

    def run(self) -> MigrationReport:
        report = MigrationReport()
        for legacy_key, new_key in self._mappings:
            try:
                if self._migrate(legacy_key, new_key):
                    report.migrated.append(legacy_key)
                    olog.step_complete(OperationStage.MIGRATION, f"Migrated {legacy_key} -> {new_key}")
                else:
                    report.skipped.append(legacy_key)
            except MigrationError as exc:
                report.failed.append(legacy_key)
                logger.warning("%s", exc)
            except Exception as exc:
                report.failed.append(legacy_key)
                logger.warning("Failed to migrate %s: %s", legacy_key, exc)

        if report.changed or report.failed:
            olog.stats(
                migrated=len(report.migrated),
                skipped=len(report.skipped),
                failed=len(report.failed),
            )
        return report

    def _migrate(self, legacy_key: str, new_key: str) -> bool:
        legacy_value = self._storage.get_item(legacy_key)
        if not legacy_value:
            return False

        current = self._storage.get_item(new_key)
        if current is not None and current not in EMPTY_VALUES:
            return False

        try:
            parsed = json.loads(legacy_value)
        except ValueError as exc:
            raise MigrationError(legacy_key, new_key, f"legacy value is not JSON ({exc})") from exc

        self._storage.set_item(new_key, json.dumps(parsed, ensure_ascii=False))
        self._storage.remove_item(legacy_key)
        return True
