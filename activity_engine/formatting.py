"""Display formatting helpers shared by the GUI and the CLI."""

from __future__ import annotations

from datetime import datetime
from typing import Final

DISPLAY_DATE_FORMAT: Final[str] = "%d-%m-%Y %H:%M"


def format_created_at(millis: int) -> str:
    """
    Render an epoch-millisecond timestamp in local time.

    Parameters
    ----------
    millis:
        Milliseconds since the Unix epoch.

    Returns
    -------
    str
        `dd-mm-YYYY HH:MM`, or an empty string if the value cannot be converted.
    """
    try:
        return datetime.fromtimestamp(millis / 1000).strftime(DISPLAY_DATE_FORMAT)
    except (OverflowError, OSError, ValueError, TypeError):
        return ""


def created_label(millis: int) -> str:
    return f"Created: {format_created_at(millis)}"
