"""
Activity list screen tests.

Runs on Qt's offscreen platform with a signal-only stand-in for the adapter.
"""

from __future__ import annotations

import os

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication, QWidget

import gui.screens.activity_list_screen as screen_module
from activity_engine.data_models import ActivityRecord
from activity_engine.view_state import ActivityViewState
from gui.dialogs.activity_dialog import ActivityDialogResult
from gui.screens.activity_list_screen import ActivityCard, ActivityListScreen


class _SignalAdapter(QObject):
    state_changed = Signal(object)
    request_add = Signal(str)
    request_toggle = Signal(object)
    request_edit = Signal(object, str)
    request_delete = Signal(object)
    request_message_shown = Signal()

    def __init__(self, state: ActivityViewState) -> None:
        super().__init__()
        self.last_state = state


@pytest.fixture(scope="module")
def app() -> QApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    existing = QApplication.instance()
    return existing if isinstance(existing, QApplication) else QApplication([])


def _cards(screen: ActivityListScreen) -> list[ActivityCard]:
    layout = screen._list_layout
    widgets = (layout.itemAt(i).widget() for i in range(layout.count()))
    return [w for w in widgets if isinstance(w, ActivityCard)]


def test_edit_dialog_opens_after_card_click_returns(
    app: QApplication, monkeypatch: pytest.MonkeyPatch
) -> None:
    original = ActivityRecord(record_id="id-1", name="Read", created_at=1, completed=False)
    replacement = ActivityRecord(record_id="id-2", name="Walk", created_at=2, completed=False)
    adapter = _SignalAdapter(ActivityViewState(items=(original,), loading=False))
    edits: list[tuple[object, str]] = []
    adapter.request_edit.connect(lambda record, name: edits.append((record, name)))
    opened: list[str] = []

    class _RenamingDialog:
        Accepted = 1

        def __init__(self, parent: QWidget, *, initial_name: str = "") -> None:
            opened.append(initial_name)

        def exec(self) -> int:
            # A snapshot arrives while the dialog is open and rebuilds the list.
            adapter.state_changed.emit(ActivityViewState(items=(replacement,), loading=False))
            return self.Accepted

        def result_value(self) -> ActivityDialogResult:
            return ActivityDialogResult(name="Read a book")

    monkeypatch.setattr(screen_module, "ActivityDialog", _RenamingDialog)
    screen = ActivityListScreen(adapter)  # type: ignore[arg-type]

    (card,) = _cards(screen)
    card.btn_edit.click()
    assert opened == []

    QTest.qWait(50)

    assert opened == ["Read"]
    assert edits == [(original, "Read a book")]
    assert [c.record for c in _cards(screen)] == [replacement]


def test_render_switches_between_loading_empty_and_list(app: QApplication) -> None:
    adapter = _SignalAdapter(ActivityViewState())
    screen = ActivityListScreen(adapter)  # type: ignore[arg-type]
    assert screen._pages.currentIndex() == screen_module._PAGE_LOADING

    adapter.state_changed.emit(ActivityViewState(loading=False))
    assert screen._pages.currentIndex() == screen_module._PAGE_EMPTY
    assert screen.empty_label.text() == screen_module.EMPTY_TEXT

    adapter.state_changed.emit(ActivityViewState(loading=False, feed_error="denied"))
    assert "denied" in screen.empty_label.text()

    record = ActivityRecord(record_id="id-1", name="Read", created_at=1, completed=True)
    adapter.state_changed.emit(ActivityViewState(items=(record,), loading=False))
    assert screen._pages.currentIndex() == screen_module._PAGE_LIST
    (card,) = _cards(screen)
    assert card.checkbox.isChecked()
