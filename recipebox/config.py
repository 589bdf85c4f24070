"""Configuration management with pydantic-settings and validation."""

from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import field_validator


# Limits that must be strictly positive
POSITIVE_LIMIT_FIELDS = {
    "fts_candidate_limit",
    "history_default_limit",
    "search_default_limit",
    "search_max_limit",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str = "sqlite:///./recipebox.db"
    sql_echo: bool = False

    # Logging
    log_level: str = "INFO"

    # Search Settings
    fts_candidate_limit: int = 100
    history_default_limit: int = 8
    search_default_limit: int = 20
    search_max_limit: int = 50

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "RECIPEBOX_",
    }

    @field_validator("database_url", mode="before")
    @classmethod
    def check_database_url(cls, v):
        """Reject blank database URLs instead of letting SQLAlchemy guess."""
        if v is None or (isinstance(v, str) and v.strip() == ""):
            raise ValueError("Database URL is empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator(*POSITIVE_LIMIT_FIELDS)
    @classmethod
    def check_positive(cls, v, info):
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings from environment.

    Raises:
        ValidationError: If environment variables are invalid.
    """
    return Settings()
