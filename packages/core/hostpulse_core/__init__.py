"""Core services: window store, sampling loop, settings, logging, diagnostics."""

from .config import AppConfig, load_config, save_config
from .diagnostics import build_doctor_payload
from .sampling_loop import (
    DEFAULT_INTERVAL_MS,
    GPU_TEMPERATURE,
    GPU_USAGE,
    MEMORY_USAGE,
    PROCESSOR_TEMPERATURE,
    PROCESSOR_USAGE,
    STORAGE_USAGE,
    STREAMS,
    LoopStatus,
    PublishedState,
    SamplingLoop,
)
from .window_store import WINDOW_CAPACITY, MetricStream, StreamMeta, WindowStore

__all__ = [
    "AppConfig",
    "DEFAULT_INTERVAL_MS",
    "GPU_TEMPERATURE",
    "GPU_USAGE",
    "LoopStatus",
    "MEMORY_USAGE",
    "MetricStream",
    "PROCESSOR_TEMPERATURE",
    "PROCESSOR_USAGE",
    "PublishedState",
    "STORAGE_USAGE",
    "STREAMS",
    "SamplingLoop",
    "StreamMeta",
    "WINDOW_CAPACITY",
    "WindowStore",
    "build_doctor_payload",
    "load_config",
    "save_config",
]
