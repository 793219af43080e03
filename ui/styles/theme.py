"""
Theme and color management.
"""

from qfluentwidgets import Theme, isDarkTheme, setTheme

# Dark theme colors
DARK_COLORS = {
    "background": "#1B2636",
    "text": "#FFFFFF",
    "text_secondary": "#AAAAAA",
    "positive": "#99FF99",
    "negative": "#FF9999",
    "notice_background": "#3A3320",
    "notice_text": "#FFD479",
    "favorite": "#FF6B81",
}

# Light theme colors
LIGHT_COLORS = {
    "background": "#FAFAFA",
    "text": "#000000",
    "text_secondary": "#666666",
    "positive": "#2E7D32",
    "negative": "#C62828",
    "notice_background": "#FFF4CE",
    "notice_text": "#7A5B00",
    "favorite": "#E0245E",
}

THEME_CYCLE = ("light", "dark", "system")

_FLUENT_THEMES = {
    "light": Theme.LIGHT,
    "dark": Theme.DARK,
    "system": Theme.AUTO,
}


def apply_theme(theme_mode: str) -> None:
    """Apply "light", "dark" or "system" to every Fluent widget."""
    setTheme(_FLUENT_THEMES.get(theme_mode, Theme.AUTO))


def next_theme_mode(theme_mode: str) -> str:
    """Theme that the toolbar toggle switches to next."""
    if theme_mode not in THEME_CYCLE:
        return THEME_CYCLE[0]
    return THEME_CYCLE[(THEME_CYCLE.index(theme_mode) + 1) % len(THEME_CYCLE)]


def colors() -> dict:
    """Palette for the theme currently in effect."""
    return DARK_COLORS if isDarkTheme() else LIGHT_COLORS


def change_color(change: float) -> str:
    return colors()["positive" if change >= 0 else "negative"]


def window_stylesheet() -> str:
    palette = colors()
    return f"""
        QWidget#centralWidget {{
            background-color: {palette['background']};
        }}
        QLabel#cachedNotice {{
            background-color: {palette['notice_background']};
            color: {palette['notice_text']};
            border-radius: 6px;
            padding: 8px 12px;
        }}
    """
