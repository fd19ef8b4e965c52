import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "EdgeStore API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Host storage: "sqlite" persists through SQLAlchemy, "memory" is process-local
    storage_backend: str = "sqlite"
    database_url: str = "sqlite:///data/edgestore.db"

    # Capacity (estimated, never queried from the host)
    quota_bytes: int = 5 * 1024 * 1024
    bytes_per_char: int = 2
    near_capacity_percentage: float = 80.0
    size_cache_seconds: float = 10.0
    warning_cooldown_seconds: float = 60.0

    # Eviction of submission records when a write is refused
    eviction_fraction: float = 0.2
    eviction_success_ratio: float = 0.5

    # Activity log retention
    activity_log_retention_days: int = 30

    # Backup format (independent of app_version)
    backup_format_version: str = "1.0.0"

    # Cross-process change polling for the sqlite backend
    sync_poll_interval_seconds: float = 2.0

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_storage: str = "INFO"          # store, quota, eviction, backup
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Reject capacity settings that would make every write fail."""
        if self.quota_bytes <= 0:
            _config_logger.warning(
                "quota_bytes=%s is not positive, falling back to 5 MiB", self.quota_bytes
            )
            object.__setattr__(self, "quota_bytes", 5 * 1024 * 1024)
        if self.bytes_per_char <= 0:
            _config_logger.warning(
                "bytes_per_char=%s is not positive, falling back to 2", self.bytes_per_char
            )
            object.__setattr__(self, "bytes_per_char", 2)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()
