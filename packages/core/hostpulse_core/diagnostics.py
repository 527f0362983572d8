"""Doctor report: environment, redacted config, and a one-shot probe."""

from __future__ import annotations

import platform
import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from hostpulse_telemetry import SnapshotUnavailable, TelemetryProvider, acquire_snapshot

from .config import AppConfig, config_path
from .logging_setup import log_dir

_SECRET_RE = re.compile(r"(token|secret|password|apikey|api_key|auth)", re.IGNORECASE)


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if _SECRET_RE.search(k):
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def build_doctor_payload(cfg: AppConfig, provider: TelemetryProvider | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config_path": str(config_path()),
        "log_dir": str(log_dir()),
        "config": redact(asdict(cfg)),
    }

    try:
        provider = provider or TelemetryProvider()
    except Exception as exc:
        payload["provider"] = {"available": False, "error": str(exc)}
        return payload

    payload["provider"] = {"available": True, "gpu_backend": getattr(provider, "gpu_backend", "unknown")}
    try:
        payload["snapshot"] = acquire_snapshot(provider.acquire).to_dict()
        payload["snapshot_error"] = None
    except SnapshotUnavailable as exc:
        payload["snapshot"] = None
        payload["snapshot_error"] = str(exc)
    return payload
