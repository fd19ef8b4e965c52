from .activity_log import ActivityLogCreate, ActivityLogEntry
from .backup import BackupMetadata, BackupValidationResult, ImportStrategy, Snapshot
from .base import PatchModel, RecordModel, WireModel, apply_patch
from .content import (
    ImagePlaceholder,
    Job,
    JobUpdate,
    Service,
    ServiceUpdate,
    TeamMember,
    TeamMemberUpdate,
    Testimonial,
    TestimonialUpdate,
)
from .stats import DataStats, StorageStatus
from .submissions import (
    Contact,
    ContactUpdate,
    JobApplication,
    JobApplicationUpdate,
    NewsletterSubscriber,
    NewsletterSubscriberUpdate,
)
from .users import User, UserUpdate

# Snapshot field -> (record model, patch model)
RECORD_MODELS: dict[str, tuple[type[RecordModel], type[PatchModel] | None]] = {
    "services": (Service, ServiceUpdate),
    "team": (TeamMember, TeamMemberUpdate),
    "testimonials": (Testimonial, TestimonialUpdate),
    "jobs": (Job, JobUpdate),
    "users": (User, UserUpdate),
    "contacts": (Contact, ContactUpdate),
    "newsletter": (NewsletterSubscriber, NewsletterSubscriberUpdate),
    "applications": (JobApplication, JobApplicationUpdate),
    "activityLogs": (ActivityLogEntry, None),
}

__all__ = [
    "ActivityLogCreate",
    "ActivityLogEntry",
    "BackupMetadata",
    "BackupValidationResult",
    "ImportStrategy",
    "Snapshot",
    "PatchModel",
    "RecordModel",
    "WireModel",
    "apply_patch",
    "ImagePlaceholder",
    "Job",
    "JobUpdate",
    "Service",
    "ServiceUpdate",
    "TeamMember",
    "TeamMemberUpdate",
    "Testimonial",
    "TestimonialUpdate",
    "DataStats",
    "StorageStatus",
    "Contact",
    "ContactUpdate",
    "JobApplication",
    "JobApplicationUpdate",
    "NewsletterSubscriber",
    "NewsletterSubscriberUpdate",
    "User",
    "UserUpdate",
    "RECORD_MODELS",
]
