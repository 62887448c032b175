"""
Module entrypoint for the activities CLI.

This file exists so that `python -m activities ...` works consistently in all
environments, including when the console-script wrapper is not installed.
"""

from __future__ import annotations

from activities.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
