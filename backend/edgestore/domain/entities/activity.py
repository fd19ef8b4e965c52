"""Vocabulary of the activity log (audit trail)."""

from enum import Enum


class ActivityAction(str, Enum):
    """What happened to the entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    RESTORE = "restore"
    EXPORT = "export"
    IMPORT = "import"


class EntityType(str, Enum):
    """Kind of entity an activity refers to."""

    SERVICE = "service"
    TEAM = "team"
    TESTIMONIAL = "testimonial"
    JOB = "job"
    USER = "user"
    CONTACT = "contact"
    NEWSLETTER = "newsletter"
    APPLICATION = "application"
    BACKUP = "backup"
