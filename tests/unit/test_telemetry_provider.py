import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry import TelemetryProvider, normalize


class TelemetryProviderTests(unittest.TestCase):
    def test_acquire_normalizes(self):
        provider = TelemetryProvider()
        raw = provider.acquire()
        for section in ("cpu", "load", "mem", "time"):
            self.assertIn(section, raw)

        snap = normalize(raw)
        self.assertGreaterEqual(snap.processor.usage_percent, 0)
        self.assertLessEqual(snap.processor.usage_percent, 100)
        self.assertGreater(snap.memory.total_gib, 0)
        self.assertGreaterEqual(snap.uptime_seconds, 0.0)
        self.assertIn(provider.gpu_backend, ("none", "nvml"))


if __name__ == "__main__":
    unittest.main()
