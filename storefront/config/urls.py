"""
Base URL resolution.

Verification emails link back to the app, so the provider must be told
where the app lives. Priority order:
1. SITE_URL (manually configured)
2. The origin of the current request
3. VERCEL_URL (automatic platform deployment URL)
4. Localhost fallback (development)
"""

from typing import Optional
from urllib.parse import urlparse

from storefront.config.settings import get_settings

CONFIRM_VIEW = "confirm"


def get_base_url(origin: Optional[str] = None) -> str:
    """Get the base URL for the application."""
    site = get_settings().site

    if site.site_url:
        return site.site_url.rstrip("/")

    if origin:
        return origin.rstrip("/")

    if site.vercel_url:
        return f"https://{site.vercel_url}"

    return site.default_base_url.rstrip("/")


def get_confirmation_url(origin: Optional[str] = None) -> str:
    """Get the URL the provider should send users to after sign-up."""
    return f"{get_base_url(origin)}/?view={CONFIRM_VIEW}"


def is_valid_domain(url: str, origin: Optional[str] = None) -> bool:
    """Check that a URL points at the same host as the app."""
    try:
        host = urlparse(url).hostname
        base_host = urlparse(get_base_url(origin)).hostname
    except ValueError:
        return False
    return host is not None and host == base_host


def get_environment_info(origin: Optional[str] = None) -> dict:
    """Get environment info for debugging."""
    app = get_settings().app
    site = get_settings().site
    return {
        "app_environment": app.app_environment,
        "has_site_url": bool(site.site_url),
        "has_vercel_url": bool(site.vercel_url),
        "site_url": site.site_url,
        "vercel_url": site.vercel_url,
        "base_url": get_base_url(origin),
        "confirmation_url": get_confirmation_url(origin),
    }
