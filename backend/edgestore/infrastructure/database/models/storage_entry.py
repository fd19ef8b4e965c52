"""SQLAlchemy ORM model for one key of the storage area."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from edgestore.infrastructure.database.base import Base


class StorageEntryModel(Base):
    """ORM model — maps to the 'storage_entries' table.

    ``version`` is bumped on every write so other processes sharing the
    database can detect which keys changed since they last looked.
    """

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StorageEntryModel(key='{self.key}', version={self.version})>"
