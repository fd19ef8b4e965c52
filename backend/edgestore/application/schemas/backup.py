"""Pydantic DTOs for backup export, validation and import."""

from enum import Enum

from pydantic import Field

from .activity_log import ActivityLogEntry
from .base import WireModel
from .content import Job, Service, TeamMember, Testimonial
from .submissions import Contact, JobApplication, NewsletterSubscriber
from .users import User


class ImportStrategy(str, Enum):
    """How a snapshot is applied to the current store."""

    REPLACE = "replace"
    MERGE = "merge"


class Snapshot(WireModel):
    """Point-in-time export of every collection."""

    version: str
    app_version: str
    backup_id: str
    description: str | None = None
    services: list[Service] = Field(default_factory=list)
    team: list[TeamMember] = Field(default_factory=list)
    testimonials: list[Testimonial] = Field(default_factory=list)
    jobs: list[Job] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
    newsletter: list[NewsletterSubscriber] = Field(default_factory=list)
    applications: list[JobApplication] = Field(default_factory=list)
    activity_logs: list[ActivityLogEntry] = Field(default_factory=list)
    exported_at: str


class BackupMetadata(WireModel):
    """Summary shown to the operator before committing to a restore."""

    version: str
    app_version: str
    exported_at: str | None = None
    record_counts: dict[str, int] = Field(default_factory=dict)


class BackupValidationResult(WireModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    metadata: BackupMetadata | None = None
