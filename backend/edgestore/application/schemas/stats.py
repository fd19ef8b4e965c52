"""Pydantic DTOs for submission statistics and storage status."""

from .base import WireModel


class DataStats(WireModel):
    total_contacts: int = 0
    total_subscribers: int = 0
    total_applications: int = 0
    new_contacts: int = 0
    active_subscribers: int = 0
    pending_applications: int = 0
    storage_usage_bytes: int = 0
    storage_usage_percentage: float = 0.0
    storage_near_capacity: bool = False


class StorageStatus(WireModel):
    usage_bytes: int
    usage_percentage: float
    near_capacity: bool
    quota_bytes: int
