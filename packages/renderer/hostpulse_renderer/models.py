"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class SeriesMeta(Protocol):
    label: str
    color: str
    chart: str
    hidden: bool


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    background_start: str
    background_end: str
    card_bg: str
    panel_bg: str
    grid: str
    text_primary: str
    text_secondary: str
    text_dim: str


@dataclass(frozen=True)
class ChartSeries:
    key: str
    label: str
    color: str
    hidden: bool
    values: tuple[float | None, ...]
