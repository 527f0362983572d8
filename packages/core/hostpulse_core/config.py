"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .paths import app_root

CONFIG_VERSION = 2


@dataclass
class SamplingConfig:
    interval_ms: int = 1000
    window_capacity: int = 20
    acquire_timeout_ms: int = 5000
    drop_absent_gpu: bool = False


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class UiConfig:
    dashboard_theme: str = "Midnight"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    @property
    def acquire_timeout(self) -> int | None:
        """Timeout in ms, or ``None`` when disabled."""
        return self.sampling.acquire_timeout_ms or None


def config_path() -> Path:
    return app_root() / "config.json"


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_sampling(cfg: AppConfig) -> None:
    s = cfg.sampling
    s.interval_ms = max(200, min(60000, _int_or(s.interval_ms, 1000)))
    s.window_capacity = max(2, min(600, _int_or(s.window_capacity, 20)))
    timeout = max(0, _int_or(s.acquire_timeout_ms, 5000))
    s.acquire_timeout_ms = 0 if timeout == 0 else max(100, timeout)
    s.drop_absent_gpu = bool(s.drop_absent_gpu)


def _normalize_server(cfg: AppConfig) -> None:
    cfg.server.host = str(cfg.server.host or "127.0.0.1")
    port = _int_or(cfg.server.port, 8765)
    cfg.server.port = port if 1 <= port <= 65535 else 8765


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.keep_log_files = max(2, _int_or(cfg.diagnostics.keep_log_files, 7))


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = _int_or(raw.get("config_version", 1), 1)
    data = dict(raw)

    if version < 2:
        # v1 kept the poll interval under "stream"; v2 moves it to "sampling".
        stream = data.pop("stream", None) or {}
        sampling = dict(data.get("sampling", {}) or {})
        if "poll_ms" in stream:
            sampling.setdefault("interval_ms", stream["poll_ms"])
        data["sampling"] = sampling
        data.setdefault("diagnostics", {})
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=_int_or(data.get("config_version"), CONFIG_VERSION),
        sampling=_merge(SamplingConfig, data.get("sampling", {})),
        server=_merge(ServerConfig, data.get("server", {})),
        ui=_merge(UiConfig, data.get("ui", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_sampling(cfg)
    _normalize_server(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
