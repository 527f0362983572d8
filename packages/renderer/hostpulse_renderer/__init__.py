"""Renderer package: derived-value formatters and dashboard composition."""

from .dashboard import DashboardRenderer
from .formatters import (
    Uptime,
    build_chart_series,
    format_uptime,
    free_percent,
    leading_zero_count,
    pad_series,
    pad_usage,
)
from .models import ChartSeries, ThemeConfig
from .themes import DEFAULT_THEME_NAME, get_theme, list_themes

__all__ = [
    "ChartSeries",
    "DEFAULT_THEME_NAME",
    "DashboardRenderer",
    "ThemeConfig",
    "Uptime",
    "build_chart_series",
    "format_uptime",
    "free_percent",
    "get_theme",
    "leading_zero_count",
    "list_themes",
    "pad_series",
    "pad_usage",
]
