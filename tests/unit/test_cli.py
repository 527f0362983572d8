import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "server"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from hostpulse_app import cli
from hostpulse_app.cli import build_parser, summary_line
from hostpulse_telemetry import normalize
from raw_samples import make_raw


class _FakeProvider:
    gpu_backend = "none"

    def __init__(self, raw=None, error=None):
        self._raw = raw
        self._error = error

    def acquire(self):
        if self._error is not None:
            raise self._error
        return self._raw


class ParserTests(unittest.TestCase):
    def test_serve_command(self):
        args = build_parser().parse_args(["serve", "--port", "9001"])
        self.assertEqual(args.command, "serve")
        self.assertEqual(args.port, 9001)

    def test_watch_command(self):
        args = build_parser().parse_args(["watch", "--ticks", "3", "--interval-ms", "250"])
        self.assertEqual(args.command, "watch")
        self.assertEqual(args.ticks, 3)
        self.assertEqual(args.interval_ms, 250)

    def test_render_requires_out(self):
        args = build_parser().parse_args(["render", "--out", "dash.png"])
        self.assertEqual(args.out, "dash.png")
        self.assertEqual(args.ticks, 5)


class SummaryLineTests(unittest.TestCase):
    def test_without_gpu(self):
        line = summary_line(normalize(make_raw()))
        self.assertIn("CPU 042% 52C", line)
        self.assertIn("MEM 025%", line)
        self.assertIn("GPU --", line)
        self.assertIn("up 1d 01:01:01", line)

    def test_with_gpu_and_no_storage(self):
        line = summary_line(normalize(make_raw(gpu=True, fs_size=[])))
        self.assertIn("GPU 073% 66C", line)
        self.assertIn("DISK --", line)


class CommandTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._env = patch.dict("os.environ", {"HOSTPULSE_HOME": self._tmp.name})
        self._env.start()

    def tearDown(self):
        self._env.stop()
        self._tmp.cleanup()

    def _run(self, func, argv):
        args = build_parser().parse_args(argv)
        buf = io.StringIO()
        with redirect_stdout(buf):
            rc = func(args)
        return rc, buf.getvalue()

    def test_snapshot_prints_json(self):
        with patch.object(cli, "TelemetryProvider", lambda: _FakeProvider(raw=make_raw())):
            rc, out = self._run(cli.cmd_snapshot, ["snapshot"])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)["memory"]["totalGiB"], 32)

    def test_snapshot_unavailable_exit_code(self):
        with patch.object(cli, "TelemetryProvider", lambda: _FakeProvider(error=OSError("no sensors"))):
            rc, out = self._run(cli.cmd_snapshot, ["snapshot"])
        self.assertEqual(rc, cli.EXIT_UNAVAILABLE)
        self.assertIn("no sensors", json.loads(out)["error"])

    def test_render_writes_png(self):
        target = Path(self._tmp.name) / "dash.png"
        with patch.object(cli, "TelemetryProvider", lambda: _FakeProvider(raw=make_raw(gpu=True))):
            rc, out = self._run(cli.cmd_render, ["render", "--out", str(target), "--ticks", "2", "--interval-ms", "1"])
        self.assertEqual(rc, 0)
        self.assertTrue(target.exists())
        self.assertEqual(json.loads(out)["ticks"], 2)

    def test_watch_stops_after_ticks(self):
        with patch.object(cli, "TelemetryProvider", lambda: _FakeProvider(raw=make_raw())):
            rc, out = self._run(cli.cmd_watch, ["watch", "--ticks", "2", "--interval-ms", "200"])
        self.assertEqual(rc, 0)
        self.assertGreaterEqual(out.count("CPU 042%"), 2)


if __name__ == "__main__":
    unittest.main()
