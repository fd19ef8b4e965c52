"""SQLAlchemy engine and session factory for the persisted storage area."""

import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from edgestore.infrastructure.database.base import Base
from edgestore.infrastructure.database.models import StorageEntryModel  # noqa: F401  registers the table

logger = logging.getLogger(__name__)


def create_storage_engine(url: str, *, echo: bool = False) -> Engine:
    """Create a sync engine, making sure a sqlite file's directory exists."""
    parsed = make_url(url)
    connect_args: dict = {}
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, future=True, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.debug("Storage schema ready on %s", engine.url.render_as_string(hide_password=True))
