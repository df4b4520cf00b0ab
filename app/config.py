# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.MONGODB_DB_NAME)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # MongoDB Configuration
    # -------------------------------------------------------------------------
    # Either a full MONGODB_URI, or DB_USER/DB_PASS/DB_HOST to build one

    MONGODB_URI: str | None = Field(
        default=None,
        description="Full MongoDB connection string (takes precedence over DB_* parts)"
    )

    DB_USER: str | None = Field(
        default=None,
        description="MongoDB Atlas username"
    )

    DB_PASS: str | None = Field(
        default=None,
        description="MongoDB Atlas password"
    )

    DB_HOST: str = Field(
        default="cluster0.z1gnsog.mongodb.net",
        description="MongoDB Atlas cluster host"
    )

    MONGODB_DB_NAME: str = Field(
        default="loanLinkDB",
        description="Database holding the loans/users/applications/payments/messages collections"
    )

    # -------------------------------------------------------------------------
    # Supabase Auth (Identity Verifier)
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL, used to locate the JWKS endpoint"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Supabase legacy JWT secret for HS256 tokens"
    )

    JWT_AUDIENCE: str = Field(
        default="authenticated",
        description="Expected 'aud' claim of identity tokens"
    )

    # -------------------------------------------------------------------------
    # Stripe (Payment Gateway)
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        ...,
        description="Stripe secret API key"
    )

    SITE_DOMAIN: str = Field(
        default="http://localhost:5173",
        description="Frontend base URL used for checkout redirect targets"
    )

    APPLICATION_FEE_CENTS: int = Field(
        default=1000,
        ge=50,
        description="One-time application fee in the smallest currency unit"
    )

    PAYMENT_CURRENCY: str = Field(
        default="usd",
        min_length=3,
        max_length=3,
        description="ISO currency code for the application fee"
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
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
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
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def mongodb_uri(self) -> str:
        """
        Resolve the MongoDB connection string.

        MONGODB_URI wins when set; otherwise an Atlas SRV URI is composed
        from DB_USER, DB_PASS and DB_HOST. Falls back to a local server.
        """
        if self.MONGODB_URI:
            return self.MONGODB_URI
        if self.DB_USER and self.DB_PASS:
            user = quote_plus(self.DB_USER)
            password = quote_plus(self.DB_PASS)
            return f"mongodb+srv://{user}:{password}@{self.DB_HOST}/?appName=Cluster0"
        return "mongodb://localhost:27017"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def site_domain(self) -> str:
        """SITE_DOMAIN without a trailing slash."""
        return self.SITE_DOMAIN.rstrip("/")

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

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
