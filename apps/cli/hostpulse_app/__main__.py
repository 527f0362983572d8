"""``python -m hostpulse_app`` and the ``hostpulse`` console script."""

from __future__ import annotations

import sys

try:
    from .cli import main as _cli_main
except ImportError:
    # Run as a file (``python apps/cli/hostpulse_app/__main__.py`` or runpy.run_path),
    # so there is no parent package; resolve through sys.path instead.
    from hostpulse_app.cli import main as _cli_main

DEFAULT_COMMAND = "serve"


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv) or [DEFAULT_COMMAND]
    return int(_cli_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
