import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.sampling.interval_ms, 1000)
            self.assertEqual(cfg.sampling.window_capacity, 20)
            self.assertEqual(cfg.acquire_timeout, 5000)
            self.assertFalse(cfg.sampling.drop_absent_gpu)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.sampling.interval_ms = 750
            cfg.sampling.drop_absent_gpu = True
            cfg.server.port = 9000
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.sampling.interval_ms, 750)
            self.assertTrue(reloaded.sampling.drop_absent_gpu)
            self.assertEqual(reloaded.server.port, 9000)

    def test_migrate_v1_shape(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"stream": {"poll_ms": 450}}), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.sampling.interval_ms, 450)
            self.assertEqual(cfg.config_version, 2)

    def test_out_of_range_values_are_clamped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "config_version": 2,
                "sampling": {"interval_ms": 5, "window_capacity": 100000, "acquire_timeout_ms": 3},
                "server": {"port": 70000},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.sampling.interval_ms, 200)
            self.assertEqual(cfg.sampling.window_capacity, 600)
            self.assertEqual(cfg.sampling.acquire_timeout_ms, 100)
            self.assertEqual(cfg.server.port, 8765)

    def test_zero_timeout_disables(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"config_version": 2, "sampling": {"acquire_timeout_ms": 0}}), encoding="utf-8")
            self.assertIsNone(load_config(path).acquire_timeout)

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path).sampling.interval_ms, 1000)


if __name__ == "__main__":
    unittest.main()
