"""
Core configuration using Pydantic Settings.
Loads from environment variables.
"""

from typing import List, Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(default="hiring-schemas", alias="APP_NAME")
    app_env: Literal["development", "test", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    json_logs: bool = Field(default=True, alias="JSON_LOGS")
    log_validation_failures: bool = Field(
        default=True, alias="LOG_VALIDATION_FAILURES"
    )

    # Schema registry
    # Schemas compiled while the registry is built instead of on first use
    schema_warmup: List[str] = Field(default_factory=list, alias="SCHEMA_WARMUP")


# Global settings instance
settings = Settings()
