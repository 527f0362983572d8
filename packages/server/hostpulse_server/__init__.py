"""Flask request/response transport for HostPulse."""

from .app import SNAPSHOT_ERROR, create_app

__all__ = ["SNAPSHOT_ERROR", "create_app"]
