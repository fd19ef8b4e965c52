"""Notification topics — one per collection plus the capacity warning channel."""

from enum import Enum


class Topic(str, Enum):
    """Fixed set of notification-bus channels."""

    SERVICES = "services"
    TEAM = "team"
    TESTIMONIALS = "testimonials"
    JOBS = "jobs"
    USERS = "users"
    CONTACTS = "contacts"
    NEWSLETTER = "newsletter"
    APPLICATIONS = "applications"
    ACTIVITY_LOGS = "activityLogs"
    SETTINGS = "settings"
    STORAGE_WARNING = "storageWarning"
