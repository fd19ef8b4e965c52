"""Pydantic documents for visitor submissions — the evictable collections."""

from pydantic import Field

from edgestore.domain.identifiers import new_record_id, to_iso, utc_now

from .base import PatchModel, RecordModel


def _now_iso() -> str:
    return to_iso(utc_now())


class Contact(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("contact"))
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    service: str | None = None
    message: str | None = None
    submitted_at: str = Field(default_factory=_now_iso)
    status: str = "new"


class ContactUpdate(PatchModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    service: str | None = None
    message: str | None = None
    status: str | None = None


class NewsletterSubscriber(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("subscriber"))
    email: str | None = None
    whatsapp: str | None = None
    subscribed_at: str = Field(default_factory=_now_iso)
    status: str = "active"

    @property
    def dedupe_key(self) -> str:
        """Lowercased e-mail, else WhatsApp number, else id."""
        return (self.email or self.whatsapp or self.id).lower()


class NewsletterSubscriberUpdate(PatchModel):
    email: str | None = None
    whatsapp: str | None = None
    status: str | None = None


class JobApplication(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("application"))
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    experience: str | None = None
    message: str | None = None
    submitted_at: str = Field(default_factory=_now_iso)
    status: str = "pending"


class JobApplicationUpdate(PatchModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    experience: str | None = None
    message: str | None = None
    status: str | None = None
