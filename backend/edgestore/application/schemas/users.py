"""Pydantic documents for site users.

Password hashing lives with authentication; the store only carries the hash.
"""

from pydantic import Field

from edgestore.domain.identifiers import new_record_id, to_iso, utc_now

from .base import PatchModel, RecordModel


class User(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("user"))
    email: str | None = None
    name: str | None = None
    password: str | None = None
    created_at: str = Field(default_factory=lambda: to_iso(utc_now()))
    is_admin: bool | None = None


class UserUpdate(PatchModel):
    email: str | None = None
    name: str | None = None
    password: str | None = None
    is_admin: bool | None = None
