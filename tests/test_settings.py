from __future__ import annotations

import json
from pathlib import Path

import pytest

from activity_engine.settings import (
    AppSettings,
    default_data_root,
    load_settings,
    save_settings,
)


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.json") == AppSettings.defaults()


@pytest.mark.parametrize("raw", ["not json", "[1, 2, 3]", '"text"'])
def test_unreadable_or_malformed_file_yields_defaults(tmp_path: Path, raw: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(raw, encoding="utf-8")

    assert load_settings(path) == AppSettings.defaults()


def test_invalid_backend_is_coerced_to_default(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"backend": "mongo", "collection": "todo"}), encoding="utf-8")

    loaded = load_settings(path)
    assert loaded.backend == "firestore"
    assert loaded.collection == "todo"


def test_settings_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = AppSettings(
        backend="sqlite",
        collection="activities",
        project_id="demo-project",
        credentials_path=tmp_path / "sa.json",
        sqlite_path=tmp_path / "db.sqlite",
    )

    save_settings(settings, path)

    assert load_settings(path) == settings


def test_with_backend_rejects_unknown_names() -> None:
    assert AppSettings().with_backend("sqlite").backend == "sqlite"
    with pytest.raises(ValueError):
        AppSettings().with_backend("mongo")


def test_resolved_sqlite_path_prefers_explicit_value(tmp_path: Path) -> None:
    explicit = tmp_path / "explicit.sqlite"
    assert AppSettings(sqlite_path=explicit).resolved_sqlite_path() == explicit


def test_default_data_root_prefers_local_appdata(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))

    assert default_data_root() == tmp_path / "Local" / "activity-list"


def test_default_data_root_falls_back_to_roaming(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))

    assert default_data_root() == tmp_path / "Roaming" / "activity-list"


def test_default_data_root_falls_back_to_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    monkeypatch.delenv("APPDATA", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))

    assert default_data_root() == tmp_path / ".local" / "share" / "activity-list"
