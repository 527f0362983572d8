"""Canonical snapshot models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# One provider reading for a single tick; sections may be absent.
RawProviderSnapshot = dict[str, Any]


@dataclass(frozen=True)
class ProcessorSnapshot:
    usage_percent: int
    model: str
    cores: int
    speed_ghz: float
    temperature_c: float


@dataclass(frozen=True)
class MemorySnapshot:
    usage_percent: int
    total_gib: int
    available_gib: int
    module_description: str


@dataclass(frozen=True)
class StorageSnapshot:
    usage_percent: int
    total_gib: int
    free_gib: int


@dataclass(frozen=True)
class GpuSnapshot:
    usage_percent: int
    model: str
    temperature_c: float
    vram_total_gib: int
    vram_used_gib: int


@dataclass(frozen=True)
class SystemSnapshot:
    processor: ProcessorSnapshot
    memory: MemorySnapshot
    storage: tuple[StorageSnapshot, ...]
    gpu: GpuSnapshot | None
    uptime_seconds: float

    def to_dict(self) -> dict[str, Any]:
        """Wire form used by the HTTP transport and the CLI."""
        p = self.processor
        m = self.memory
        return {
            "processor": {
                "usagePercent": p.usage_percent,
                "model": p.model,
                "cores": p.cores,
                "speedGHz": p.speed_ghz,
                "temperatureC": p.temperature_c,
            },
            "memory": {
                "usagePercent": m.usage_percent,
                "totalGiB": m.total_gib,
                "availableGiB": m.available_gib,
                "moduleDescription": m.module_description,
            },
            "storage": [
                {"usagePercent": s.usage_percent, "totalGiB": s.total_gib, "freeGiB": s.free_gib}
                for s in self.storage
            ],
            "gpu": (
                None
                if self.gpu is None
                else {
                    "usagePercent": self.gpu.usage_percent,
                    "model": self.gpu.model,
                    "temperatureC": self.gpu.temperature_c,
                    "vramTotalGiB": self.gpu.vram_total_gib,
                    "vramUsedGiB": self.gpu.vram_used_gib,
                }
            ),
            "uptimeSeconds": self.uptime_seconds,
        }
