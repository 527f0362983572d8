"""Normalize raw provider readings into the canonical ``SystemSnapshot``.

Raw readings come from a sensing provider and may omit whole sections
depending on host capability (no discrete GPU, no thermal sensors, no memory
layout data). Optional sections fall back to fixed defaults. Required
sections that are missing, or numeric fields holding non-numeric values,
make the whole reading unusable: :class:`SnapshotUnavailable` is raised and
no partial snapshot is produced.

Numeric guards (zero totals, ``NaN``, ``None`` in optional slots) silently
produce ``0``; they are never reported to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Any

from .models import (
    GpuSnapshot,
    MemorySnapshot,
    ProcessorSnapshot,
    RawProviderSnapshot,
    StorageSnapshot,
    SystemSnapshot,
)

GIB = 1 << 30
NO_MODULE_DESCRIPTION = "N/A"
UNKNOWN_MODEL = "Unknown"


class SnapshotUnavailable(RuntimeError):
    """A tick produced no usable snapshot."""


class AcquisitionTimeout(SnapshotUnavailable):
    """The provider did not answer within the configured timeout."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _finite(value: float) -> float | None:
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def clamp_percent(value: float) -> int:
    number = _finite(value)
    if number is None:
        return 0
    return max(0, min(100, _round_half_up(number)))


def percent_of(part: float, whole: float) -> int:
    part_f, whole_f = _finite(part), _finite(whole)
    if part_f is None or whole_f is None or whole_f <= 0:
        return 0
    return clamp_percent(part_f / whole_f * 100.0)


def bytes_to_gib(value: float) -> int:
    number = _finite(value)
    if number is None:
        return 0
    return max(0, _round_half_up(number / GIB))


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name)
    if not isinstance(value, Mapping):
        raise SnapshotUnavailable(f"provider reading has no usable '{name}' section")
    return value


def _optional_section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SnapshotUnavailable(f"'{name}' section is malformed: {type(value).__name__}")
    return value


def _optional_list(raw: Mapping[str, Any], name: str) -> list[Mapping[str, Any]]:
    value = raw.get(name)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, Mapping) for item in value):
        raise SnapshotUnavailable(f"'{name}' is not a list of entries")
    return list(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_range(value: int | float, where: str) -> float:
    # NaN and infinities pass through; ints beyond float range do not.
    try:
        number = float(value)
    except OverflowError as exc:
        raise SnapshotUnavailable(f"{where} is out of range: {value!r}") from exc
    return number


def _number(section: Mapping[str, Any], key: str, where: str) -> float:
    value = section.get(key)
    if value is None:
        return 0.0
    if not _is_number(value):
        raise SnapshotUnavailable(f"{where}.{key} is not numeric: {value!r}")
    number = _in_range(value, f"{where}.{key}")
    return number if math.isfinite(number) else 0.0


def _text(section: Mapping[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _processor(raw: Mapping[str, Any]) -> ProcessorSnapshot:
    cpu = _section(raw, "cpu")
    load = _section(raw, "load")
    temps = _optional_section(raw, "cpu_temperature")

    parts = [_text(cpu, "manufacturer", ""), _text(cpu, "brand", "")]
    model = " ".join(p for p in parts if p) or UNKNOWN_MODEL

    return ProcessorSnapshot(
        usage_percent=clamp_percent(_number(load, "current_load", "load")),
        model=model,
        cores=max(0, int(_number(cpu, "physical_cores", "cpu"))),
        speed_ghz=max(0.0, _number(cpu, "speed_ghz", "cpu")),
        temperature_c=_number(temps, "main", "cpu_temperature"),
    )


def _module_description(layout: list[Mapping[str, Any]]) -> str:
    seen: list[str] = []
    for module in layout:
        kind = _text(module, "type", "")
        if kind and kind not in seen:
            seen.append(kind)
    return ", ".join(seen) or NO_MODULE_DESCRIPTION


def _memory(raw: Mapping[str, Any]) -> MemorySnapshot:
    mem = _section(raw, "mem")
    total = _number(mem, "total", "mem")
    available = _number(mem, "available", "mem")
    if mem.get("active") is None:
        active = max(total - available, 0.0)
    else:
        active = _number(mem, "active", "mem")

    return MemorySnapshot(
        usage_percent=percent_of(active, total),
        total_gib=bytes_to_gib(total),
        available_gib=bytes_to_gib(available),
        module_description=_module_description(_optional_list(raw, "mem_layout")),
    )


def _storage(raw: Mapping[str, Any]) -> tuple[StorageSnapshot, ...]:
    out = []
    for disk in _optional_list(raw, "fs_size"):
        size = _number(disk, "size", "fs_size")
        out.append(
            StorageSnapshot(
                usage_percent=percent_of(_number(disk, "used", "fs_size"), size),
                total_gib=bytes_to_gib(size),
                free_gib=bytes_to_gib(_number(disk, "available", "fs_size")),
            )
        )
    return tuple(out)


def _gpu(raw: Mapping[str, Any]) -> GpuSnapshot | None:
    graphics = _optional_section(raw, "graphics")
    controllers = _optional_list(graphics, "controllers")
    if not controllers:
        return None

    # First controller wins; multiple GPUs are not aggregated.
    first = controllers[0]
    utilization = first.get("utilization_gpu")
    if not _is_number(utilization):
        return None
    utilization = _in_range(utilization, "graphics.utilization_gpu")
    if not math.isfinite(utilization):
        return None

    return GpuSnapshot(
        usage_percent=clamp_percent(utilization),
        model=_text(first, "model", UNKNOWN_MODEL),
        temperature_c=_number(first, "temperature_gpu", "graphics"),
        vram_total_gib=bytes_to_gib(_number(first, "memory_total", "graphics")),
        vram_used_gib=bytes_to_gib(_number(first, "memory_used", "graphics")),
    )


def normalize(raw: RawProviderSnapshot) -> SystemSnapshot:
    if not isinstance(raw, Mapping):
        raise SnapshotUnavailable(f"provider returned {type(raw).__name__}, expected a mapping")

    clock = _section(raw, "time")
    return SystemSnapshot(
        processor=_processor(raw),
        memory=_memory(raw),
        storage=_storage(raw),
        gpu=_gpu(raw),
        uptime_seconds=max(0.0, _number(clock, "uptime", "time")),
    )


def acquire_snapshot(acquire_raw: Callable[[], RawProviderSnapshot]) -> SystemSnapshot:
    """Call the provider once and normalize its reading."""
    try:
        raw = acquire_raw()
    except SnapshotUnavailable:
        raise
    except Exception as exc:
        raise SnapshotUnavailable(f"acquisition failed: {exc}") from exc
    return normalize(raw)
