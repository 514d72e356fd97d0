# hr_payroll/core/config.py

"""
Application settings.

Values come from environment variables (or a local .env file) so that
database location and batch sizing can change per deployment.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Database Configuration
    database_url: str = "sqlite:///./hr_payroll.db"
    log_sql_queries: bool = False

    # Environment Settings
    environment: str = "development"
    log_level: str = "INFO"

    # Employee codes in the directory are "<prefix><5 digits>", e.g. NV00001
    organization_code_prefix: str = "NV"

    # Batch payroll worker pool
    payroll_max_workers: int = 4

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator("payroll_max_workers")
    @classmethod
    def validate_max_workers(cls, v):
        if v < 1:
            raise ValueError("payroll_max_workers must be at least 1")
        return v

    @field_validator("organization_code_prefix")
    @classmethod
    def validate_prefix(cls, v):
        if not v.isalpha():
            raise ValueError("organization_code_prefix must be alphabetic")
        return v.upper()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()
