"""Built-in dashboard themes."""

from __future__ import annotations

from .models import ThemeConfig

DEFAULT_THEME_NAME = "Midnight"

THEMES: dict[str, ThemeConfig] = {
    "Midnight": ThemeConfig(
        name="Midnight",
        background_start="#1F2937",
        background_end="#111827",
        card_bg="#111827",
        panel_bg="#1F2937",
        grid="#374151",
        text_primary="#F9FAFB",
        text_secondary="#D1D5DB",
        text_dim="#6B7280",
    ),
    "Daylight": ThemeConfig(
        name="Daylight",
        background_start="#F3F4F6",
        background_end="#E5E7EB",
        card_bg="#FFFFFF",
        panel_bg="#F9FAFB",
        grid="#D1D5DB",
        text_primary="#111827",
        text_secondary="#374151",
        text_dim="#9CA3AF",
    ),
}


def list_themes() -> list[str]:
    return sorted(THEMES.keys())


def get_theme(name: str | None) -> ThemeConfig:
    if not name:
        return THEMES[DEFAULT_THEME_NAME]
    return THEMES.get(name, THEMES[DEFAULT_THEME_NAME])
