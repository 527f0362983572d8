"""CLI entrypoints: HTTP server, one-shot snapshot, console watch, PNG render, doctor."""

from __future__ import annotations

import argparse
import json
import sys
import threading
import time
from pathlib import Path

from hostpulse_core import SamplingLoop, build_doctor_payload, load_config
from hostpulse_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from hostpulse_renderer import DashboardRenderer, format_uptime, pad_usage
from hostpulse_server import create_app
from hostpulse_telemetry import SnapshotUnavailable, SystemSnapshot, TelemetryProvider, acquire_snapshot

EXIT_UNAVAILABLE = 2


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def summary_line(snap: SystemSnapshot) -> str:
    up = format_uptime(snap.uptime_seconds)
    disk = f"{pad_usage(snap.storage[0].usage_percent)}%" if snap.storage else "--"
    gpu = "--" if snap.gpu is None else f"{pad_usage(snap.gpu.usage_percent)}% {snap.gpu.temperature_c:.0f}C"
    return (
        f"CPU {pad_usage(snap.processor.usage_percent)}% {snap.processor.temperature_c:.0f}C"
        f" | MEM {pad_usage(snap.memory.usage_percent)}%"
        f" | DISK {disk}"
        f" | GPU {gpu}"
        f" | up {up.days}d {up.hours:02d}:{up.minutes:02d}:{up.seconds:02d}"
    )


def cmd_serve(args: argparse.Namespace) -> int:
    cfg = load_config()
    install_crash_hooks()
    provider = TelemetryProvider()
    loop = SamplingLoop.from_config(cfg)
    app = create_app(provider.acquire, loop)

    loop.start(cfg.sampling.interval_ms, provider.acquire)
    try:
        app.run(host=args.host or cfg.server.host, port=args.port or cfg.server.port, threaded=True)
    finally:
        loop.stop()
    return 0


def cmd_snapshot(_args: argparse.Namespace) -> int:
    provider = TelemetryProvider()
    try:
        snap = acquire_snapshot(provider.acquire)
    except SnapshotUnavailable as exc:
        _print_json({"error": str(exc)})
        return EXIT_UNAVAILABLE
    _print_json(snap.to_dict())
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    cfg = load_config()
    provider = TelemetryProvider()
    loop = SamplingLoop.from_config(cfg)
    done = threading.Event()
    seen = 0

    def _count() -> None:
        nonlocal seen
        seen += 1
        if args.ticks and seen >= args.ticks:
            done.set()

    def _on_update(snap, _windows) -> None:
        print(summary_line(snap), flush=True)
        _count()

    def _on_error(reason: str) -> None:
        print(f"unavailable: {reason}", file=sys.stderr, flush=True)
        _count()

    loop.add_consumer(_on_update, _on_error)
    loop.start(args.interval_ms or cfg.sampling.interval_ms, provider.acquire)
    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        loop.stop()

    status = loop.status
    return 0 if status.ticks_ok else EXIT_UNAVAILABLE


def cmd_render(args: argparse.Namespace) -> int:
    cfg = load_config()
    provider = TelemetryProvider()
    loop = SamplingLoop.from_config(cfg)
    interval_s = (args.interval_ms or cfg.sampling.interval_ms) / 1000.0

    for i in range(max(1, args.ticks)):
        if i:
            time.sleep(interval_s)
        loop.tick(provider.acquire)

    state = loop.latest
    if state is None:
        _print_json({"error": loop.status.last_error})
        return EXIT_UNAVAILABLE

    renderer = DashboardRenderer(capacity=loop.store.capacity)
    image = renderer.render_image(state.snapshot, state.windows, state.streams, args.theme or cfg.ui.dashboard_theme)
    out = renderer.save_png(image, Path(args.out).expanduser().resolve())
    _print_json({"success": True, "path": str(out), "ticks": state.tick})
    return 0


def cmd_doctor(_args: argparse.Namespace) -> int:
    _print_json(build_doctor_payload(load_config()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostpulse", description="HostPulse resource monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_cmd = sub.add_parser("serve", help="Run the sampling loop behind the HTTP API")
    serve_cmd.add_argument("--host", default=None)
    serve_cmd.add_argument("--port", type=int, default=None)
    serve_cmd.set_defaults(func=cmd_serve)

    snap_cmd = sub.add_parser("snapshot", help="Print one normalized snapshot")
    snap_cmd.set_defaults(func=cmd_snapshot)

    watch_cmd = sub.add_parser("watch", help="Print a summary line per sampling tick")
    watch_cmd.add_argument("--ticks", type=int, default=0, help="Stop after N ticks (0 runs until Ctrl+C)")
    watch_cmd.add_argument("--interval-ms", type=int, default=None)
    watch_cmd.set_defaults(func=cmd_watch)

    render_cmd = sub.add_parser("render", help="Sample for a few ticks and write a dashboard PNG")
    render_cmd.add_argument("--out", required=True, help="Output PNG path")
    render_cmd.add_argument("--ticks", type=int, default=5)
    render_cmd.add_argument("--interval-ms", type=int, default=None)
    render_cmd.add_argument("--theme", default=None)
    render_cmd.set_defaults(func=cmd_render)

    doctor_cmd = sub.add_parser("doctor", help="Print environment and provider diagnostics")
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    get_logger().info(f"command {args.command}", extra={"event": "command"})
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
