"""Application state objects."""

from storefront.state.store import Store
from storefront.state.theme import ColorScheme, Theme, ThemeStore

__all__ = ["ColorScheme", "Store", "Theme", "ThemeStore"]
