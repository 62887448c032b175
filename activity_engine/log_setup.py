"""Process-wide logging configuration for the CLI and GUI entry points."""

from __future__ import annotations

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str | int = "WARNING") -> None:
    """
    Install a single stream handler on the root logger.

    Calling this more than once replaces the level but never stacks handlers.

    Parameters
    ----------
    level:
        Level name (e.g. "INFO") or numeric level.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
    else:
        resolved = level

    root = logging.getLogger()
    if not any(getattr(h, "_activity_list_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._activity_list_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(resolved)
