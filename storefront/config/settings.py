"""
Configuration Management for Storefront

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
A missing provider key never stops the app from importing; it only
fails when a component actually needs the provider.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Hosted auth + database + storage provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Project URL of the provider"
    )
    anon_key: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        description="Anonymous (public) API key"
    )

    @field_validator('url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class SiteSettings(BaseSettings):
    """Where the app is served from (used in verification emails)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    site_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SITE_URL", "NEXT_PUBLIC_SITE_URL"),
        description="Explicit public base URL override"
    )
    vercel_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VERCEL_URL"),
        description="Deployment host provided by the hosting platform"
    )
    default_base_url: str = Field(
        default="http://localhost:8501",
        description="Fallback for local development"
    )


class CloudinarySettings(BaseSettings):
    """Cloudinary object storage configuration (optional backend)."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDINARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    cloud_name: str = Field(
        ...,
        description="Cloudinary cloud name"
    )
    api_key: str = Field(
        ...,
        description="Cloudinary API key"
    )
    api_secret: str = Field(
        ...,
        description="Cloudinary API secret"
    )
    root_folder: str = Field(
        default="storefront",
        description="Folder that holds the receipts/avatars buckets"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (shows the auth diagnostics view)"
    )

    object_storage_backend: str = Field(
        default="supabase",
        pattern="^(supabase|cloudinary)$",
        description="Where receipts and avatars are stored"
    )

    # Profile defaults
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency assigned to newly provisioned profiles"
    )
    default_language: str = Field(
        default="en",
        description="Language assigned to newly provisioned profiles"
    )

    verification_redirect_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        le=60.0,
        description="Delay before leaving the confirmation page after success"
    )

    # Upload limits
    max_avatar_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum avatar upload size in MB"
    )
    max_receipt_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt upload size in MB"
    )

    # Dashboard
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100
    )
    chart_window_days: int = Field(
        default=7,
        ge=1,
        le=366
    )

    @property
    def max_avatar_size_bytes(self) -> int:
        return self.max_avatar_size_mb * 1024 * 1024

    @property
    def max_receipt_size_bytes(self) -> int:
        return self.max_receipt_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sections are loaded lazily to allow partial configuration

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def site(self) -> SiteSettings:
        return SiteSettings()

    @property
    def cloudinary(self) -> CloudinarySettings:
        return CloudinarySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_auth_config() -> dict:
    """
    Check that the auth provider can be reached at all.

    Returns {"is_valid": bool, "issues": [str, ...]}.
    """
    issues = []
    try:
        _ = get_settings().supabase
    except ValidationError as e:
        missing = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        if missing & {"url", "SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"}:
            issues.append("Missing SUPABASE_URL environment variable")
        if missing & {"anon_key", "SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"}:
            issues.append("Missing SUPABASE_ANON_KEY environment variable")
        if not issues:
            issues.append(f"Invalid provider configuration: {e}")

    return {
        "is_valid": not issues,
        "issues": issues,
    }


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus
    {setting_name_error: message} for the failures.
    Cloudinary is only checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    sections = ["supabase", "site", "app"]
    try:
        if settings.app.object_storage_backend == "cloudinary":
            sections.append("cloudinary")
    except ValidationError:
        pass

    for name in sections:
        try:
            _ = getattr(settings, name)
            results[name] = True
        except ValidationError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
