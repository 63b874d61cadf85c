"""
Module entrypoint for the Restitch CLI.

This file exists so that `python -m restitch ...` works consistently in all
environments, including when the console-script wrapper is not installed.

Notes
-----
This module contains no business logic. It delegates to the CLI module.
"""

from __future__ import annotations

from restitch.cli import main


def _run() -> None:
    """
    Execute the Restitch command line interface.

    Raises
    ------
    SystemExit
        Always; carries the CLI exit code.
    """
    raise SystemExit(main())


if __name__ == "__main__":
    _run()
