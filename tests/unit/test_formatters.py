import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from hostpulse_core.window_store import StreamMeta
from hostpulse_renderer.formatters import (
    Uptime,
    build_chart_series,
    format_uptime,
    free_percent,
    leading_zero_count,
    pad_series,
    pad_usage,
)
from hostpulse_telemetry.models import StorageSnapshot


class UptimeTests(unittest.TestCase):
    def test_one_of_each(self):
        self.assertEqual(format_uptime(90061), Uptime(days=1, hours=1, minutes=1, seconds=1))

    def test_as_dict_order(self):
        self.assertEqual(list(format_uptime(59).as_dict().items()), [("days", 0), ("hours", 0), ("minutes", 0), ("seconds", 59)])

    def test_fractional_and_negative(self):
        self.assertEqual(format_uptime(3599.9), Uptime(0, 0, 59, 59))
        self.assertEqual(format_uptime(-10), Uptime(0, 0, 0, 0))


class StorageTests(unittest.TestCase):
    def test_free_percent(self):
        self.assertEqual(free_percent(StorageSnapshot(usage_percent=25, total_gib=500, free_gib=375)), 75)

    def test_zero_total(self):
        self.assertEqual(free_percent(StorageSnapshot(usage_percent=0, total_gib=0, free_gib=0)), 0)


class CardTextTests(unittest.TestCase):
    def test_pad_usage(self):
        self.assertEqual(pad_usage(7), "007")
        self.assertEqual(pad_usage(42), "042")
        self.assertEqual(pad_usage(100), "100")

    def test_leading_zero_count(self):
        self.assertEqual(leading_zero_count("007"), 2)
        self.assertEqual(leading_zero_count("100"), 0)
        self.assertEqual(leading_zero_count("000"), 3)


class SeriesTests(unittest.TestCase):
    def test_pad_series_left_pads(self):
        self.assertEqual(pad_series([1.0, 2.0], 4), [None, None, 1.0, 2.0])
        self.assertEqual(pad_series([1.0, 2.0, 3.0], 2), [2.0, 3.0])

    def test_build_chart_series_filters_by_chart(self):
        streams = {
            "processor.usage": StreamMeta("Processor", "#3B82F6"),
            "processor.temperature": StreamMeta("Processor Temperature", "#3B82F6", chart="temperature"),
            "storage.usage": StreamMeta("Storage", "#10B981", hidden=True),
        }
        windows = {"processor.usage": (1.0, 2.0), "processor.temperature": (50.0,), "storage.usage": (3.0,)}

        series = build_chart_series(windows, streams, capacity=3)
        self.assertEqual([s.key for s in series], ["processor.usage", "storage.usage"])
        self.assertEqual(series[0].values, (None, 1.0, 2.0))
        self.assertTrue(series[1].hidden)

        temps = build_chart_series(windows, streams, capacity=3, chart="temperature")
        self.assertEqual([s.label for s in temps], ["Processor Temperature"])


if __name__ == "__main__":
    unittest.main()
