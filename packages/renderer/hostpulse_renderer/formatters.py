"""Display-ready values derived from a snapshot and its windows.

Everything here is pure: no state, no I/O, and no failure modes beyond the
zero guards.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass

from hostpulse_telemetry import StorageSnapshot, percent_of

from .models import ChartSeries, SeriesMeta


@dataclass(frozen=True)
class Uptime:
    days: int
    hours: int
    minutes: int
    seconds: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def format_uptime(seconds: float) -> Uptime:
    total = int(math.floor(seconds)) if math.isfinite(seconds) and seconds > 0 else 0
    return Uptime(
        days=total // 86400,
        hours=(total % 86400) // 3600,
        minutes=(total % 3600) // 60,
        seconds=total % 60,
    )


def free_percent(storage: StorageSnapshot) -> int:
    return percent_of(storage.free_gib, storage.total_gib)


def pad_usage(percent: int) -> str:
    """Three-digit card value, e.g. ``7`` -> ``"007"``."""
    return str(max(0, min(100, int(percent)))).zfill(3)


def leading_zero_count(text: str) -> int:
    """Leading zeros a card draws dimmed (``"007"`` -> 2)."""
    return len(text) - len(text.lstrip("0"))


def pad_series(values: Sequence[float], capacity: int) -> list[float | None]:
    """Left-pad a window with gaps so young series line up on the right."""
    tail = list(values)[-capacity:] if capacity > 0 else []
    return [None] * (capacity - len(tail)) + tail


def build_chart_series(
    windows: Mapping[str, Sequence[float]],
    streams: Mapping[str, SeriesMeta],
    capacity: int,
    chart: str = "utilization",
) -> list[ChartSeries]:
    out = []
    for key, values in windows.items():
        meta = streams.get(key)
        if meta is None or meta.chart != chart:
            continue
        out.append(
            ChartSeries(
                key=key,
                label=meta.label,
                color=meta.color,
                hidden=meta.hidden,
                values=tuple(pad_series(values, capacity)),
            )
        )
    return out
