"""
Module entrypoint for the homebak CLI.

This file exists so that `python -m homebak ...` works consistently in all
environments, including when the console-script wrapper is not installed.
"""

from __future__ import annotations

from homebak.cli import main


def _run() -> None:
    """
    Execute the homebak command line interface.

    Raises
    ------
    SystemExit
        Always, carrying the CLI's exit code.
    """
    raise SystemExit(main())


if __name__ == "__main__":
    _run()
