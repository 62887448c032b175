"""
Application settings.

Settings are a small JSON document under the data root. They choose the backend
and carry the values needed to reach it; nothing else in the engine reads the
environment or the filesystem for configuration.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

BACKEND_FIRESTORE: Final[str] = "firestore"
BACKEND_SQLITE: Final[str] = "sqlite"
BACKENDS: Final[frozenset[str]] = frozenset({BACKEND_FIRESTORE, BACKEND_SQLITE})

APP_DIR_NAME: Final[str] = "activity-list"
SETTINGS_FILE_NAME: Final[str] = "settings.json"
SQLITE_FILE_NAME: Final[str] = "activities.sqlite"


def default_data_root() -> Path:
    """
    Resolve the default data root.

    Preference order:
    1) %LOCALAPPDATA% if set
    2) %APPDATA% (Roaming) as fallback
    3) ~/.local/share on other platforms
    """
    local = os.environ.get("LOCALAPPDATA")
    if local:
        return Path(local) / APP_DIR_NAME

    roaming = os.environ.get("APPDATA")
    if roaming:
        return Path(roaming) / APP_DIR_NAME

    return Path.home() / ".local" / "share" / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class AppSettings:
    """
    Persisted application settings.

    Attributes
    ----------
    backend:
        "firestore" for the hosted collection, "sqlite" for the local store.
    collection:
        Firestore collection name.
    project_id:
        Optional Google Cloud project id. Inferred from credentials if None.
    credentials_path:
        Optional service-account JSON. Application Default Credentials if None.
    sqlite_path:
        Optional SQLite database path. Defaults to a file under the data root.
    """

    backend: str = BACKEND_FIRESTORE
    collection: str = "activities"
    project_id: str | None = None
    credentials_path: Path | None = None
    sqlite_path: Path | None = None

    @staticmethod
    def defaults() -> "AppSettings":
        return AppSettings()

    def resolved_sqlite_path(self) -> Path:
        if self.sqlite_path is not None:
            return self.sqlite_path
        return default_data_root() / SQLITE_FILE_NAME

    def with_backend(self, backend: str) -> "AppSettings":
        if backend not in BACKENDS:
            raise ValueError(f"Unknown backend: {backend!r}")
        return replace(self, backend=backend)


def settings_path(data_root: Path | None = None) -> Path:
    root = default_data_root() if data_root is None else data_root
    return root / SETTINGS_FILE_NAME


def load_settings(path: Path | None = None) -> AppSettings:
    """
    Load settings from disk.

    Parameters
    ----------
    path:
        Settings file. If None, `settings.json` under the default data root.

    Returns
    -------
    AppSettings
        Loaded settings, or defaults if missing/unreadable.
    """
    target = settings_path() if path is None else path
    try:
        raw = target.read_text(encoding="utf-8")
        payload = json.loads(raw)
    except (OSError, ValueError):
        return AppSettings.defaults()

    if not isinstance(payload, dict):
        return AppSettings.defaults()

    def _s(v: object) -> str | None:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None

    def _p(v: object) -> Path | None:
        text = _s(v)
        return Path(text) if text is not None else None

    defaults = AppSettings.defaults()

    backend = payload.get("backend", defaults.backend)
    if backend not in BACKENDS:
        backend = defaults.backend

    return AppSettings(
        backend=str(backend),
        collection=_s(payload.get("collection")) or defaults.collection,
        project_id=_s(payload.get("project_id")),
        credentials_path=_p(payload.get("credentials_path")),
        sqlite_path=_p(payload.get("sqlite_path")),
    )


def save_settings(settings: AppSettings, path: Path | None = None) -> None:
    """
    Save settings to disk.

    Parameters
    ----------
    settings:
        Settings to persist.
    path:
        Settings file. If None, `settings.json` under the default data root.
    """
    target = settings_path() if path is None else path
    target.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "backend": settings.backend,
        "collection": settings.collection,
        "project_id": settings.project_id,
        "credentials_path": str(settings.credentials_path)
        if settings.credentials_path is not None
        else None,
        "sqlite_path": str(settings.sqlite_path) if settings.sqlite_path is not None else None,
    }
    target.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
