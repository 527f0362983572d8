"""HTTP transport for snapshots and the published dashboard state."""

from __future__ import annotations

from typing import Any, Callable

from flask import Flask, jsonify

from hostpulse_core.logging_setup import get_logger
from hostpulse_core.sampling_loop import PublishedState, SamplingLoop
from hostpulse_telemetry import SnapshotUnavailable, acquire_snapshot
from hostpulse_telemetry.models import RawProviderSnapshot

SNAPSHOT_ERROR = "Failed to fetch system information"


def _state_payload(state: PublishedState, loop: SamplingLoop) -> dict[str, Any]:
    return {
        "tick": state.tick,
        "publishedUtc": state.published_utc,
        "snapshot": state.snapshot.to_dict(),
        "windows": {key: list(values) for key, values in state.windows.items()},
        "streams": {
            key: {"label": meta.label, "color": meta.color, "chart": meta.chart, "hidden": meta.hidden}
            for key, meta in state.streams.items()
        },
        "capacity": loop.store.capacity,
        "lastError": loop.status.last_error,
    }


def create_app(acquire_raw: Callable[[], RawProviderSnapshot], loop: SamplingLoop | None = None) -> Flask:
    app = Flask("hostpulse_server")
    logger = get_logger()

    @app.get("/api/system-info")
    def system_info():
        try:
            snapshot = acquire_snapshot(acquire_raw)
        except SnapshotUnavailable as exc:
            logger.warning(f"system-info request failed: {exc}", extra={"event": "system_info_failed"})
            return jsonify({"error": SNAPSHOT_ERROR}), 500
        return jsonify(snapshot.to_dict())

    @app.get("/api/dashboard")
    def dashboard():
        if loop is None:
            return jsonify({"error": "Sampling loop not running"}), 503
        state = loop.latest
        if state is None:
            return jsonify({"error": "No snapshot published yet", "lastError": loop.status.last_error}), 503
        return jsonify(_state_payload(state, loop))

    return app
