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
    # Anon key: every request runs as the signed-in
    # user, so the todos table's row-level policies apply.

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    TODOS_TABLE: str = Field(
        default="todos",
        description="Table holding todo rows"
    )

    # -------------------------------------------------------------------------
    # Image Storage
    # -------------------------------------------------------------------------

    IMAGE_BUCKET: str = Field(
        default="todo-images",
        description="Storage bucket for todo images (must be public)"
    )

    IMAGE_CACHE_CONTROL: str = Field(
        default="3600",
        description="Cache-Control max-age (seconds) sent with uploads"
    )

    MAX_IMAGE_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum image size in MB"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/png,image/jpeg,image/gif,image/webp",
        description="Allowed image content types (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    EMAIL_REDIRECT_URL: str | None = Field(
        default=None,
        description="Where the sign-up confirmation link points (defaults to the request origin)"
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
        description="Enable debug mode (verbose logging, auto-reload)"
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

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing client cookies"
    )

    CLIENT_COOKIE_NAME: str = Field(
        default="todo_client",
        description="Cookie carrying the signed client id"
    )

    CLIENT_IDLE_TIMEOUT_SECONDS: int = Field(
        default=1800,
        ge=60,
        description="Close a client's controller after this long without requests"
    )

    MAX_CLIENTS: int = Field(
        default=500,
        ge=1,
        description="Most client controllers kept at once (least recently used is closed first)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://todos.app" -> ["http://localhost:5173", "https://todos.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_types_list(self) -> list[str]:
        """
        Parse ALLOWED_IMAGE_TYPES string into a list.

        Example: "image/png, image/jpeg" -> ["image/png", "image/jpeg"]
        """
        return [ct.strip().lower() for ct in self.ALLOWED_IMAGE_TYPES.split(",") if ct.strip()]

    @property
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for image size validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

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
