"""Configuration package."""

from storefront.config.settings import (
    AppSettings,
    CloudinarySettings,
    Settings,
    SiteSettings,
    SupabaseSettings,
    get_settings,
    validate_all_settings,
    validate_auth_config,
)
from storefront.config.urls import (
    get_base_url,
    get_confirmation_url,
    get_environment_info,
    is_valid_domain,
)

__all__ = [
    "AppSettings",
    "CloudinarySettings",
    "Settings",
    "SiteSettings",
    "SupabaseSettings",
    "get_base_url",
    "get_confirmation_url",
    "get_environment_info",
    "get_settings",
    "is_valid_domain",
    "validate_all_settings",
    "validate_auth_config",
]
