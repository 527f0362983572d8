from __future__ import annotations

import os
import platform
from pathlib import Path


def app_root() -> Path:
    """Per-user directory holding config.json and logs/."""
    override = os.environ.get("HOSTPULSE_HOME")
    if override:
        return Path(override).expanduser()
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "HostPulse"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "HostPulse"
    return Path.home() / ".config" / "hostpulse"
