from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Carelog API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///data/carelog.db"
    database_echo: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # SQLite connection pragmas (ignored for PostgreSQL)
    sqlite_journal_mode: str = "WAL"
    sqlite_synchronous: str = "NORMAL"
    sqlite_cache_size: int = -64000           # negative = KiB
    sqlite_temp_store: str = "MEMORY"

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    # Reporting & export
    export_batch_size: int = 1000
    export_progress_every: int = 10           # log progress every N batches
    statistics_breakdown_limit: int = 20
    report_top_clients: int = 15              # also used for activities
    report_top_outcomes: int = 10
    drafts_limit: int = 50

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_audit: str = "INFO"            # audit trail writes
    log_level_export: str = "INFO"           # ExportLogger pipeline

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
