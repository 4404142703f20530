"""
Theme store.

Holds the appearance preferences (light/dark/system and a color scheme),
resolves "system" to an actual theme, and persists choices in whatever
mapping it is given - Streamlit session state in the app, a dict in tests.
"""

from enum import Enum
from typing import Callable, MutableMapping, Optional

from storefront.state.store import Store

THEME_KEY = "theme"
COLOR_SCHEME_KEY = "colorScheme"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class ColorScheme(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"
    RED = "red"


class ThemeStore(Store["ThemeStore"]):
    """Appearance preferences with subscribe/notify."""

    def __init__(
        self,
        preferences: Optional[MutableMapping[str, str]] = None,
        prefers_dark: Callable[[], bool] = lambda: False,
    ):
        super().__init__()
        self._preferences = preferences if preferences is not None else {}
        self._prefers_dark = prefers_dark
        self.theme = Theme.SYSTEM
        self.color_scheme = ColorScheme.BLUE
        self._load()

    def _load(self) -> None:
        """Restore saved preferences, ignoring values we don't recognise."""
        saved_theme = self._preferences.get(THEME_KEY)
        saved_scheme = self._preferences.get(COLOR_SCHEME_KEY)
        try:
            if saved_theme:
                self.theme = Theme(saved_theme)
        except ValueError:
            self._logger.warning("theme_preference_ignored", value=saved_theme)
        try:
            if saved_scheme:
                self.color_scheme = ColorScheme(saved_scheme)
        except ValueError:
            self._logger.warning("color_scheme_preference_ignored", value=saved_scheme)

    def _save(self) -> None:
        self._preferences[THEME_KEY] = self.theme.value
        self._preferences[COLOR_SCHEME_KEY] = self.color_scheme.value

    @property
    def actual_theme(self) -> Theme:
        """The theme to render: never SYSTEM."""
        if self.theme == Theme.SYSTEM:
            return Theme.DARK if self._prefers_dark() else Theme.LIGHT
        return self.theme

    @property
    def css_classes(self) -> list[str]:
        return [self.actual_theme.value, f"theme-{self.color_scheme.value}"]

    def set_theme(self, theme: Theme) -> None:
        self.theme = Theme(theme)
        self._save()
        self._notify()

    def set_color_scheme(self, scheme: ColorScheme) -> None:
        self.color_scheme = ColorScheme(scheme)
        self._save()
        self._notify()
