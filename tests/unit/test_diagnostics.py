import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from hostpulse_core.config import AppConfig
from hostpulse_core.diagnostics import build_doctor_payload, redact
from raw_samples import make_raw


class _Provider:
    gpu_backend = "nvml"

    def __init__(self, raw):
        self._raw = raw

    def acquire(self):
        return self._raw


class DiagnosticsTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._env = patch.dict(os.environ, {"HOSTPULSE_HOME": self._tmp.name})
        self._env.start()

    def tearDown(self):
        self._env.stop()
        self._tmp.cleanup()

    def test_payload_includes_probe(self):
        payload = build_doctor_payload(AppConfig(), provider=_Provider(make_raw(gpu=True)))
        self.assertTrue(payload["provider"]["available"])
        self.assertEqual(payload["provider"]["gpu_backend"], "nvml")
        self.assertEqual(payload["snapshot"]["gpu"]["usagePercent"], 73)
        self.assertIsNone(payload["snapshot_error"])
        self.assertEqual(payload["config"]["sampling"]["window_capacity"], 20)
        self.assertTrue(payload["log_dir"].startswith(self._tmp.name))

    def test_payload_reports_unusable_reading(self):
        payload = build_doctor_payload(AppConfig(), provider=_Provider({"cpu": {}, "time": {"uptime": 5}}))
        self.assertIsNone(payload["snapshot"])
        self.assertIn("load", payload["snapshot_error"])

    def test_redact_nested(self):
        out = redact({"server": {"auth_token": "abc", "port": 1}, "items": [{"password": "x"}]})
        self.assertEqual(out["server"]["auth_token"], "***REDACTED***")
        self.assertEqual(out["server"]["port"], 1)
        self.assertEqual(out["items"][0]["password"], "***REDACTED***")


if __name__ == "__main__":
    unittest.main()
