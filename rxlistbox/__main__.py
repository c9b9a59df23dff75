"""
Run rxlistbox as a module.

    python -m rxlistbox demo --rows 8
    python -m rxlistbox show-config

Arguments are handed unchanged to `rxlistbox.cli.main`, whose return value
becomes the process exit code.
"""

from __future__ import annotations

from rxlistbox.cli import main


def _run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    _run()
