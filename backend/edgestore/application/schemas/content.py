"""Pydantic documents for the public content collections."""

from pydantic import Field

from edgestore.domain.identifiers import new_record_id

from .base import PatchModel, RecordModel, WireModel


class ImagePlaceholder(WireModel):
    """Image reference embedded in services and team members."""

    id: str | None = None
    description: str | None = None
    image_url: str | None = None
    image_hint: str | None = None


class Service(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("service"))
    title: str | None = None
    description: str | None = None
    image: ImagePlaceholder | None = None
    icon: str | None = None
    category: str | None = None
    google_form_url: str | None = None
    active: bool | None = None


class ServiceUpdate(PatchModel):
    title: str | None = None
    description: str | None = None
    image: ImagePlaceholder | None = None
    icon: str | None = None
    category: str | None = None
    google_form_url: str | None = None
    active: bool | None = None


class TeamMember(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("team"))
    name: str | None = None
    role: str | None = None
    bio: str | None = None
    image: ImagePlaceholder | None = None
    order: int | None = None
    active: bool | None = None


class TeamMemberUpdate(PatchModel):
    name: str | None = None
    role: str | None = None
    bio: str | None = None
    image: ImagePlaceholder | None = None
    order: int | None = None
    active: bool | None = None


class Testimonial(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("testimonial"))
    quote: str | None = None
    author: str | None = None
    company: str | None = None
    active: bool | None = None


class TestimonialUpdate(PatchModel):
    quote: str | None = None
    author: str | None = None
    company: str | None = None
    active: bool | None = None


class Job(RecordModel):
    id: str = Field(default_factory=lambda: new_record_id("job"))
    title: str | None = None
    department: str | None = None
    location: str | None = None
    type: str | None = None
    description: str | None = None
    requirements: list[str] | None = None
    experience: str | None = None
    salary: str | None = None
    active: bool | None = None


class JobUpdate(PatchModel):
    title: str | None = None
    department: str | None = None
    location: str | None = None
    type: str | None = None
    description: str | None = None
    requirements: list[str] | None = None
    experience: str | None = None
    salary: str | None = None
    active: bool | None = None
