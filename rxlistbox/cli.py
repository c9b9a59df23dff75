"""
Command-line interface for rxlistbox.

Notes
-----
The CLI is intentionally thin. It resolves configuration, sets up logging and
delegates to the demo application.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from binding_engine.config import LOG_LEVELS, config_as_dict, load_binding_config, resolve_config_path
from binding_engine.errors import BindingError
from gui.demo_app import run_demo

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="rxlistbox",
        description="Reactive list box bindings for Qt",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    demo_p = sub.add_parser("demo", help="Open a window with a stream-driven list box")
    demo_p.add_argument("--rows", type=int, default=5, help="Initial number of rows (default: 5).")
    demo_p.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Emit a new list from a background thread every N milliseconds.",
    )
    demo_p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file. Defaults to $RXLISTBOX_CONFIG or the user config directory.",
    )
    demo_p.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Override the configured log level.",
    )

    show_p = sub.add_parser("show-config", help="Print the resolved configuration as JSON")
    show_p.add_argument("--config", type=Path, default=None, help="Configuration file to read.")

    return parser


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "show-config":
        path = resolve_config_path() if args.config is None else args.config
        config = load_binding_config(path)
        print(json.dumps({"path": str(path), **config_as_dict(config)}, indent=2, sort_keys=True))
        return 0

    if args.command == "demo":
        if args.rows < 0:
            print("ERROR: --rows must not be negative.")
            return 2
        config = load_binding_config(args.config)
        configure_logging(args.log_level or config.log_level)

        try:
            return run_demo(config=config, rows=args.rows, interval_ms=args.interval_ms)
        except (BindingError, ValueError) as exc:
            print(f"ERROR: {exc}")
            return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
