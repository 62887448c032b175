"""Dark blue palette shared by all widgets."""

from __future__ import annotations

from typing import Final

PRIMARY: Final[str] = "#58A6FF"
ON_PRIMARY: Final[str] = "#0D1117"
BACKGROUND: Final[str] = "#010409"
SURFACE: Final[str] = "#0D1117"
ON_SURFACE: Final[str] = "#C9D1D9"
SECONDARY: Final[str] = "#8B949E"
ERROR: Final[str] = "#F85149"
OUTLINE: Final[str] = "#30363D"

APP_STYLESHEET: Final[str] = f"""
QWidget {{
    background: {BACKGROUND};
    color: {ON_SURFACE};
}}
QFrame#activityCard {{
    background: {SURFACE};
    border: 1px solid {OUTLINE};
    border-radius: 8px;
}}
QFrame#activityCard QLabel, QFrame#activityCard QCheckBox {{
    background: transparent;
}}
QLabel#screenTitle {{
    color: {PRIMARY};
    font-size: 24px;
    font-weight: bold;
}}
QLabel#secondaryText {{
    color: {SECONDARY};
}}
QLabel#notice {{
    background: {SURFACE};
    border: 1px solid {OUTLINE};
    border-radius: 6px;
    padding: 6px 12px;
}}
QFrame#divider {{
    background: {OUTLINE};
    max-height: 1px;
}}
QPushButton {{
    background: {SURFACE};
    border: 1px solid {OUTLINE};
    border-radius: 4px;
    padding: 4px 10px;
}}
QPushButton:disabled {{
    color: {SECONDARY};
}}
QPushButton#fab {{
    background: {PRIMARY};
    color: {ON_PRIMARY};
    border: none;
    border-radius: 28px;
    font-size: 28px;
    min-width: 56px;
    min-height: 56px;
}}
QPushButton#deleteButton {{
    color: {ERROR};
}}
QLineEdit {{
    background: {SURFACE};
    border: 1px solid {OUTLINE};
    border-radius: 4px;
    padding: 4px;
}}
"""
