"""Host telemetry: canonical models, normalization, and the sensing provider."""

from .models import (
    GpuSnapshot,
    MemorySnapshot,
    ProcessorSnapshot,
    RawProviderSnapshot,
    StorageSnapshot,
    SystemSnapshot,
)
from .normalizer import (
    AcquisitionTimeout,
    SnapshotUnavailable,
    acquire_snapshot,
    bytes_to_gib,
    clamp_percent,
    normalize,
    percent_of,
)
from .provider import TelemetryProvider

__all__ = [
    "AcquisitionTimeout",
    "GpuSnapshot",
    "MemorySnapshot",
    "ProcessorSnapshot",
    "RawProviderSnapshot",
    "SnapshotUnavailable",
    "StorageSnapshot",
    "SystemSnapshot",
    "TelemetryProvider",
    "acquire_snapshot",
    "bytes_to_gib",
    "clamp_percent",
    "normalize",
    "percent_of",
]
