"""
Configuration and settings for the Pings backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings, built once and handed to every handler."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")

    # Document store tables
    checkins_table: str = Field(default="PingsCheckins")
    medications_table: str = Field(default="PingsMedications")
    photos_table: str = Field(default="PingsPhotos")
    family_table: str = Field(default="PingsFamily")
    users_table: str = Field(default="PingsUsers")
    tokens_table: str = Field(default="PingsDeviceTokens")

    # Photos
    photos_bucket: str = Field(default="pings-photos")
    photo_url_expiry: int = Field(default=3600, ge=1)

    # Family fan-out; check-ins are not published when unset
    family_notifications_topic: Optional[str] = Field(default=None)
    recent_checkins_limit: int = Field(default=10, ge=1)

    # AWS
    aws_region: Optional[str] = Field(default=None)
    aws_endpoint_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Alternate backends
    database_url: Optional[str] = Field(default=None)
    redis_url: Optional[str] = Field(default=None)

    document_backend: Literal["memory", "dynamodb", "sql"] = Field(default="memory")
    blob_backend: Literal["memory", "s3"] = Field(default="memory")
    notifier_backend: Literal["memory", "sns", "redis"] = Field(default="memory")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    def table_names(self) -> dict[str, str]:
        return {
            "checkins": self.checkins_table,
            "medications": self.medications_table,
            "photos": self.photos_table,
            "family": self.family_table,
            "users": self.users_table,
            "tokens": self.tokens_table,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
