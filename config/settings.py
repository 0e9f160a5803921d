"""
Configuration settings for the CareBook scheduling backend.
Loads from environment variables with validation.
"""

from typing import List, Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_TIME_SLOTS = [
    "09:00 AM",
    "10:00 AM",
    "11:00 AM",
    "12:00 PM",
    "01:00 PM",
    "02:00 PM",
    "03:00 PM",
    "04:00 PM",
    "05:00 PM",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production"] = "development"
    debug: bool = False

    # Storage
    storage_backend: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Where appointments are persisted"
    )
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key"
    )

    # Session tokens issued by the auth service
    jwt_secret: str = Field(..., description="Shared secret for verifying bearer tokens")
    jwt_algorithm: str = "HS256"

    # Meeting links
    meet_link_base_url: str = Field(
        default="https://meet.google.com/lookup",
        description="Prefix for generated meeting links"
    )

    # Scheduling Configuration
    clinic_timezone: str = "UTC"
    time_slots: List[str] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS))

    # HTTP
    cors_origins: List[str] = Field(
        default_factory=list,
        description="Allowed origins; empty reflects the request origin"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
