"""psutil-backed sensing provider with graceful GPU fallbacks."""

from __future__ import annotations

import platform
import time
from pathlib import Path
from typing import Any

import psutil

from .models import RawProviderSnapshot


class _GpuAdapter:
    name = "none"

    def controllers(self) -> list[dict[str, Any]]:
        return []


class _NvmlGpuAdapter(_GpuAdapter):
    name = "nvml"

    def __init__(self) -> None:
        import pynvml  # type: ignore

        self._nvml = pynvml
        pynvml.nvmlInit()

    def controllers(self) -> list[dict[str, Any]]:
        nvml = self._nvml
        out: list[dict[str, Any]] = []
        for index in range(nvml.nvmlDeviceGetCount()):
            h = nvml.nvmlDeviceGetHandleByIndex(index)
            name = nvml.nvmlDeviceGetName(h)
            if isinstance(name, bytes):
                name = name.decode("utf-8", "replace")
            try:
                utilization = float(nvml.nvmlDeviceGetUtilizationRates(h).gpu)
            except nvml.NVMLError:
                utilization = None
            try:
                temp = float(nvml.nvmlDeviceGetTemperature(h, nvml.NVML_TEMPERATURE_GPU))
            except nvml.NVMLError:
                temp = None
            mem = nvml.nvmlDeviceGetMemoryInfo(h)
            out.append(
                {
                    "model": name,
                    "utilization_gpu": utilization,
                    "temperature_gpu": temp,
                    "memory_total": int(mem.total),
                    "memory_used": int(mem.used),
                }
            )
        return out


def _build_gpu_adapter() -> _GpuAdapter:
    try:
        return _NvmlGpuAdapter()
    except Exception:
        return _GpuAdapter()


def _cpu_temp_c() -> float | None:
    try:
        temps = psutil.sensors_temperatures()
    except (AttributeError, OSError):
        return None
    if not temps:
        return None

    for name in ("coretemp", "cpu_thermal", "k10temp", "zenpower", "acpitz"):
        entries = temps.get(name)
        if entries:
            val = entries[0].current
            return float(val) if val is not None else None

    for _name, entries in temps.items():
        if entries and entries[0].current is not None:
            return float(entries[0].current)
    return None


def _cpu_identity() -> tuple[str, str]:
    """Best-effort (manufacturer, brand) pair."""
    cpuinfo = Path("/proc/cpuinfo")
    if cpuinfo.exists():
        vendor = ""
        brand = ""
        for line in cpuinfo.read_text(encoding="utf-8", errors="replace").splitlines():
            key, _, value = line.partition(":")
            key = key.strip()
            if key == "vendor_id" and not vendor:
                vendor = value.strip()
            elif key in ("model name", "Model") and not brand:
                brand = value.strip()
        if brand:
            if vendor and vendor.lower() in brand.lower():
                vendor = ""
            return vendor, brand
    return "", platform.processor()


class TelemetryProvider:
    """Single polling provider producing one raw reading per call."""

    def __init__(self) -> None:
        self._gpu = _build_gpu_adapter()
        self._manufacturer, self._brand = _cpu_identity()
        self._boot_time = psutil.boot_time()
        # Prime non-blocking CPU measurement.
        psutil.cpu_percent(interval=None)

    @property
    def gpu_backend(self) -> str:
        return self._gpu.name

    def _filesystems(self) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        seen: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if part.device in seen:
                continue
            try:
                du = psutil.disk_usage(part.mountpoint)
            except (PermissionError, OSError):
                continue
            seen.add(part.device)
            out.append(
                {
                    "fs": part.device,
                    "mount": part.mountpoint,
                    "size": du.total,
                    "used": du.used,
                    "available": du.free,
                }
            )
        return out

    def acquire(self) -> RawProviderSnapshot:
        freq = psutil.cpu_freq()
        vm = psutil.virtual_memory()

        return {
            "cpu": {
                "manufacturer": self._manufacturer,
                "brand": self._brand,
                "physical_cores": psutil.cpu_count(logical=False) or psutil.cpu_count() or 0,
                "speed_ghz": (round(float(freq.current) / 1000.0, 2) if freq else None),
            },
            "load": {"current_load": float(psutil.cpu_percent(interval=None))},
            "cpu_temperature": {"main": _cpu_temp_c()},
            "mem": {
                "total": vm.total,
                "active": vm.total - vm.available,
                "available": vm.available,
            },
            "fs_size": self._filesystems(),
            "graphics": {"controllers": self._gpu.controllers()},
            "time": {"uptime": max(time.time() - self._boot_time, 0.0)},
        }
