"""Collection registry — storage keys, topics and snapshot fields per collection.

Storage keys are the persisted layout; the legacy mappings describe the
pre-centralised layout that is migrated once at startup.
"""

from dataclasses import dataclass

from .activity import EntityType
from .topic import Topic

STORAGE_KEY_PREFIX = "edgemakers_db_"


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one persisted collection."""

    name: str                       # snapshot field name, e.g. "activityLogs"
    storage_key: str
    topic: Topic
    entity_type: EntityType | None  # None for the activity log itself
    id_prefix: str
    label_fields: tuple[str, ...] = ("title",)
    fallback_label: str = "Unknown"
    timestamp_field: str | None = None  # set for evictable submission collections
    display_name: str = "Record"


SERVICES = CollectionSpec(
    name="services",
    storage_key=f"{STORAGE_KEY_PREFIX}services",
    topic=Topic.SERVICES,
    entity_type=EntityType.SERVICE,
    id_prefix="service",
    label_fields=("title",),
    fallback_label="Unknown Service",
    display_name="Service",
)
TEAM = CollectionSpec(
    name="team",
    storage_key=f"{STORAGE_KEY_PREFIX}team",
    topic=Topic.TEAM,
    entity_type=EntityType.TEAM,
    id_prefix="team",
    label_fields=("name",),
    fallback_label="Unknown Member",
    display_name="Team member",
)
TESTIMONIALS = CollectionSpec(
    name="testimonials",
    storage_key=f"{STORAGE_KEY_PREFIX}testimonials",
    topic=Topic.TESTIMONIALS,
    entity_type=EntityType.TESTIMONIAL,
    id_prefix="testimonial",
    label_fields=("author",),
    fallback_label="Unknown Author",
    display_name="Testimonial",
)
JOBS = CollectionSpec(
    name="jobs",
    storage_key=f"{STORAGE_KEY_PREFIX}jobs",
    topic=Topic.JOBS,
    entity_type=EntityType.JOB,
    id_prefix="job",
    label_fields=("title",),
    fallback_label="Unknown Job",
    display_name="Job",
)
USERS = CollectionSpec(
    name="users",
    storage_key=f"{STORAGE_KEY_PREFIX}users",
    topic=Topic.USERS,
    entity_type=EntityType.USER,
    id_prefix="user",
    label_fields=("name", "email"),
    fallback_label="Unknown User",
    display_name="User",
)
CONTACTS = CollectionSpec(
    name="contacts",
    storage_key=f"{STORAGE_KEY_PREFIX}contacts",
    topic=Topic.CONTACTS,
    entity_type=EntityType.CONTACT,
    id_prefix="contact",
    label_fields=("name", "email"),
    fallback_label="Unknown Contact",
    timestamp_field="submitted_at",
    display_name="Contact",
)
NEWSLETTER = CollectionSpec(
    name="newsletter",
    storage_key=f"{STORAGE_KEY_PREFIX}newsletter",
    topic=Topic.NEWSLETTER,
    entity_type=EntityType.NEWSLETTER,
    id_prefix="subscriber",
    label_fields=("email", "whatsapp"),
    fallback_label="Subscriber",
    timestamp_field="subscribed_at",
    display_name="Subscriber",
)
APPLICATIONS = CollectionSpec(
    name="applications",
    storage_key=f"{STORAGE_KEY_PREFIX}applications",
    topic=Topic.APPLICATIONS,
    entity_type=EntityType.APPLICATION,
    id_prefix="application",
    label_fields=("name",),
    fallback_label="Unknown Applicant",
    timestamp_field="submitted_at",
    display_name="Application",
)
ACTIVITY_LOGS = CollectionSpec(
    name="activityLogs",
    storage_key=f"{STORAGE_KEY_PREFIX}activity_logs",
    topic=Topic.ACTIVITY_LOGS,
    entity_type=None,
    id_prefix="log",
    label_fields=("entity_name",),
    timestamp_field="timestamp",
    display_name="Activity log",
)

SETTINGS_STORAGE_KEY = f"{STORAGE_KEY_PREFIX}settings"

CONTENT_COLLECTIONS: tuple[CollectionSpec, ...] = (SERVICES, TEAM, TESTIMONIALS, JOBS)
SUBMISSION_COLLECTIONS: tuple[CollectionSpec, ...] = (CONTACTS, NEWSLETTER, APPLICATIONS)
ALL_COLLECTIONS: tuple[CollectionSpec, ...] = (
    *CONTENT_COLLECTIONS,
    USERS,
    *SUBMISSION_COLLECTIONS,
    ACTIVITY_LOGS,
)

# Legacy key -> centralised key, applied once by the legacy migrator.
LEGACY_KEY_MAPPINGS: tuple[tuple[str, str], ...] = (
    ("edgemakers_contacts", CONTACTS.storage_key),
    ("edgemakers_newsletter", NEWSLETTER.storage_key),
    ("edgemakers_job_applications", APPLICATIONS.storage_key),
    ("edgemakers_user", USERS.storage_key),
)

_BY_KEY = {spec.storage_key: spec for spec in ALL_COLLECTIONS}
_BY_NAME = {spec.name: spec for spec in ALL_COLLECTIONS}


def collection_for_key(storage_key: str) -> CollectionSpec | None:
    """Return the collection persisted under ``storage_key``, if any."""
    return _BY_KEY.get(storage_key)


def collection_by_name(name: str) -> CollectionSpec | None:
    """Return the collection whose snapshot field is ``name``, if any."""
    return _BY_NAME.get(name)
