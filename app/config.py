# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (used for password sign-in)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret for verifying Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CLIENT_URL: str = Field(
        default="http://localhost:5173",
        description="Base URL of the web client (used in invitation links)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Image Upload Settings
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum size of a single uploaded image in MB"
    )

    MAX_IMAGES_PER_UPLOAD: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum number of catalog images in one upload request"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/jpg,image/png,image/gif,image/webp",
        description="Allowed catalog image MIME types (comma-separated)"
    )

    CATALOG_IMAGES_BUCKET: str = Field(
        default="catalog-images",
        description="Storage bucket for catalog image variants"
    )

    UPLOADS_BUCKET: str = Field(
        default="uploads",
        description="Storage bucket for order uploads (production images)"
    )

    PRODUCTION_IMAGE_RESIZE_THRESHOLD_MB: int = Field(
        default=2,
        ge=1,
        description="Production images larger than this are downscaled"
    )

    PRODUCTION_IMAGE_MAX_DIMENSION: int = Field(
        default=1920,
        ge=100,
        description="Longest edge for downscaled production images"
    )

    # -------------------------------------------------------------------------
    # Invitations
    # -------------------------------------------------------------------------

    INVITATION_EXPIRY_DAYS: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Days until an invitation token expires"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://app.threadcraft.io" -> [...]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_types_list(self) -> list[str]:
        """Parse ALLOWED_IMAGE_TYPES string into a list of MIME types."""
        return [mime.strip().lower() for mime in self.ALLOWED_IMAGE_TYPES.split(",")]

    @property
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

    @property
    def production_resize_threshold_bytes(self) -> int:
        return self.PRODUCTION_IMAGE_RESIZE_THRESHOLD_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
