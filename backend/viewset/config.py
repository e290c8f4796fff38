"""
ViewSet: Configuration
=======================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by the database layer, the pagination adapter, the SQLAlchemy
       manager (session cache key) and the demo application.
When:  Loaded once at module import time; validated before the app starts.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    All settings have development defaults. The demo application and the
    default SQLAlchemy adapter read them; library users that build their own
    managers may ignore the database section entirely.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: <dialect>+<async driver>://...
    # The default keeps the demo app self-contained (file-backed SQLite).
    database_url: str = Field(
        default="sqlite+aiosqlite:///./viewset.db",
        description="Async SQLAlchemy connection URL",
    )

    # Validates pooled connections before use (catches stale connections)
    db_pool_pre_ping: bool = Field(default=True)

    # request.state attribute the SQLAlchemy manager caches its session under
    db_session_state_key: str = Field(default="db", min_length=1)

    # ── Pagination ────────────────────────────────────────────────────────
    # Page size used when a list request carries no `limit` parameter
    default_page_limit: int = Field(default=20, ge=0)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }


# Singleton instance, imported throughout the package
settings = Settings()
