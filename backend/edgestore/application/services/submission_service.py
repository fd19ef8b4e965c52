"""Read-side helpers over the visitor submission collections.

Statistics, spreadsheet-friendly CSV exports and duplicate-submission checks
used by the public forms before they append a new record.
"""

import csv
import io
import json
import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, TypeVar

from edgestore.application.schemas import (
    Contact,
    ContactUpdate,
    DataStats,
    JobApplication,
    JobApplicationUpdate,
    NewsletterSubscriber,
    NewsletterSubscriberUpdate,
    RecordModel,
)
from edgestore.domain.identifiers import parse_iso, utc_now

from .collection_repository import CollectionRepository
from .quota_monitor import QuotaMonitor

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordModel)

CONTACT_CSV_HEADERS = ("ID", "Name", "Email", "Phone", "Service", "Message", "Submitted At", "Status")
NEWSLETTER_EMAIL_CSV_HEADERS = ("Email", "Subscribed At", "Status")
NEWSLETTER_WHATSAPP_CSV_HEADERS = ("WhatsApp Number", "Email", "Subscribed At", "Status")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class RecentSubmission(Generic[R]):
    """Result of a duplicate check: the latest matching record, if any."""

    is_duplicate: bool
    last: R | None = None


def to_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Header line plus fully quoted rows (embedded quotes doubled), ``\\n``-joined."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if value is None else str(value) for value in row])
    body = buffer.getvalue().rstrip("\n")
    header = ",".join(headers)
    return f"{header}\n{body}" if body else header


class SubmissionService:
    def __init__(
        self,
        contacts: CollectionRepository[Contact, ContactUpdate],
        newsletter: CollectionRepository[NewsletterSubscriber, NewsletterSubscriberUpdate],
        applications: CollectionRepository[JobApplication, JobApplicationUpdate],
        quota_monitor: QuotaMonitor,
        *,
        now: Callable[[], datetime] = utc_now,
    ):
        self._contacts = contacts
        self._newsletter = newsletter
        self._applications = applications
        self._quota = quota_monitor
        self._now = now

    # ── Statistics ──────────────────────────────────────────────────

    def stats(self) -> DataStats:
        try:
            contacts = self._contacts.all()
            subscribers = self._newsletter.all()
            applications = self._applications.all()
            state = self._quota.state()
            return DataStats(
                total_contacts=len(contacts),
                total_subscribers=len(subscribers),
                total_applications=len(applications),
                new_contacts=sum(1 for c in contacts if c.status == "new"),
                active_subscribers=sum(1 for s in subscribers if s.status == "active"),
                pending_applications=sum(1 for a in applications if a.status == "pending"),
                storage_usage_bytes=state.usage_bytes,
                storage_usage_percentage=state.usage_percentage,
                storage_near_capacity=state.near_capacity,
            )
        except Exception:
            logger.exception("Error getting data stats")
            return DataStats()

    # ── Exports ─────────────────────────────────────────────────────

    def contacts_csv(self) -> str:
        """All contacts as CSV, or ``""`` when there are none."""
        contacts = self._contacts.all()
        if not contacts:
            return ""
        return to_csv(
            CONTACT_CSV_HEADERS,
            (
                (c.id, c.name, c.email, c.phone, c.service, c.message, c.submitted_at, c.status or "new")
                for c in contacts
            ),
        )

    def newsletter_emails_csv(self) -> str:
        subscribers = self._newsletter.all()
        if not subscribers:
            return ""
        return to_csv(
            NEWSLETTER_EMAIL_CSV_HEADERS,
            ((s.email, s.subscribed_at, s.status) for s in subscribers),
        )

    def newsletter_whatsapp_csv(self) -> str:
        """Only subscribers that left a WhatsApp number."""
        subscribers = [s for s in self._newsletter.all() if s.whatsapp and s.whatsapp.strip()]
        if not subscribers:
            return ""
        return to_csv(
            NEWSLETTER_WHATSAPP_CSV_HEADERS,
            ((s.whatsapp, s.email, s.subscribed_at, s.status) for s in subscribers),
        )

    def export_json(self, name: str) -> str:
        """Indented JSON array of one submission collection (wire shape)."""
        repository = {
            "contacts": self._contacts,
            "newsletter": self._newsletter,
            "applications": self._applications,
        }[name]
        documents = [record.to_document() for record in repository.all()]
        return json.dumps(documents, indent=2, ensure_ascii=False)

    # ── Duplicate checks ────────────────────────────────────────────

    def is_duplicate_newsletter_email(self, email: str) -> bool:
        normalized = email.strip().lower()
        return any(
            s.email and s.email.strip().lower() == normalized for s in self._newsletter.all()
        )

    def recent_contact_submission(self, email: str, minutes: int = 5) -> RecentSubmission[Contact]:
        """Was a contact form sent from ``email`` less than ``minutes`` ago?"""
        email = email.lower()
        matches = [c for c in self._contacts.all() if (c.email or "").lower() == email]
        return self._recent(matches, minutes)

    def recent_job_application(
        self, email: str, position: str, minutes: int = 5
    ) -> RecentSubmission[JobApplication]:
        email, position = email.lower(), position.lower()
        matches = [
            a
            for a in self._applications.all()
            if (a.email or "").lower() == email and (a.position or "").lower() == position
        ]
        return self._recent(matches, minutes)

    def _recent(self, matches: list[R], minutes: int) -> RecentSubmission[R]:
        if not matches:
            return RecentSubmission(is_duplicate=False)
        last = max(matches, key=lambda r: parse_iso(r.submitted_at) or _OLDEST)
        return RecentSubmission(
            is_duplicate=self._minutes_since(last.submitted_at) < minutes,
            last=last,
        )

    def _minutes_since(self, timestamp: str) -> float:
        moment = parse_iso(timestamp)
        if moment is None:
            return math.inf
        return math.floor((self._now() - moment).total_seconds() / 60)
