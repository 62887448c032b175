"""
Activity list screen.

This screen renders the projector's view state: a loading indicator, an
empty-state notice, or a scrollable list of activity cards, plus a floating
add button and a transient notice for messages.

Notes
-----
- The screen holds no business rules. Every action is forwarded to the adapter.
- The list is rebuilt from each state; nothing is updated optimistically.
"""

from __future__ import annotations

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QCheckBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from activity_engine.data_models import ActivityRecord
from activity_engine.formatting import created_label
from activity_engine.view_state import ActivityViewState
from gui.adapters.activity_projector_adapter import ActivityProjectorAdapter
from gui.dialogs.activity_dialog import ActivityDialog

EMPTY_TEXT = "No activities yet. Press '+' to add one."
NOTICE_TIMEOUT_MS = 2500

_PAGE_LOADING = 0
_PAGE_EMPTY = 1
_PAGE_LIST = 2


class ActivityCard(QFrame):
    """One row of the list: completion checkbox, name, creation time, actions."""

    toggle_requested = Signal(object)  # ActivityRecord
    edit_requested = Signal(object)  # ActivityRecord
    delete_requested = Signal(object)  # ActivityRecord

    def __init__(self, record: ActivityRecord) -> None:
        super().__init__()
        self.record = record
        self.setObjectName("activityCard")

        row = QHBoxLayout(self)
        row.setContentsMargins(8, 12, 8, 12)

        self.checkbox = QCheckBox()
        self.checkbox.setChecked(record.completed)
        self.checkbox.clicked.connect(lambda _checked: self.toggle_requested.emit(self.record))
        row.addWidget(self.checkbox)

        text_col = QVBoxLayout()
        text_col.setContentsMargins(8, 0, 8, 0)

        self.name_label = QLabel(record.name)
        name_font = QFont(self.name_label.font())
        name_font.setBold(True)
        name_font.setPointSize(13)
        name_font.setStrikeOut(record.completed)
        self.name_label.setFont(name_font)
        self.name_label.setWordWrap(True)
        if record.completed:
            self.name_label.setObjectName("secondaryText")
        text_col.addWidget(self.name_label)

        self.date_label = QLabel(created_label(record.created_at))
        self.date_label.setObjectName("secondaryText")
        text_col.addWidget(self.date_label)

        row.addLayout(text_col, 1)

        self.btn_edit = QPushButton("Edit")
        self.btn_edit.setToolTip("Rename this activity.")
        self.btn_edit.clicked.connect(lambda: self.edit_requested.emit(self.record))
        row.addWidget(self.btn_edit)

        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setObjectName("deleteButton")
        self.btn_delete.setToolTip("Delete this activity.")
        self.btn_delete.clicked.connect(lambda: self.delete_requested.emit(self.record))
        row.addWidget(self.btn_delete)


class ActivityListScreen(QWidget):
    """
    Single screen of the application.

    Responsibilities
    ----------------
    - Render ActivityViewState delivered by the adapter.
    - Open the add/edit dialog and forward confirmed names as intents.
    - Show transient messages and acknowledge them immediately.
    """

    def __init__(self, adapter: ActivityProjectorAdapter) -> None:
        super().__init__()
        self._adapter = adapter
        self._adapter.state_changed.connect(self._render)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)

        title = QLabel("Activities")
        title.setObjectName("screenTitle")
        root.addWidget(title)

        divider = QFrame()
        divider.setObjectName("divider")
        divider.setFrameShape(QFrame.HLine)
        root.addWidget(divider)

        self._pages = QStackedWidget()
        self._pages.addWidget(self._build_loading_page())
        self._pages.addWidget(self._build_empty_page())
        self._pages.addWidget(self._build_list_page())
        root.addWidget(self._pages, 1)

        bottom = QHBoxLayout()
        self.notice = QLabel("")
        self.notice.setObjectName("notice")
        self.notice.setVisible(False)
        bottom.addWidget(self.notice)
        bottom.addStretch(1)

        self.btn_add = QPushButton("+")
        self.btn_add.setObjectName("fab")
        self.btn_add.setToolTip("Add activity")
        self.btn_add.clicked.connect(self._open_add_dialog)
        bottom.addWidget(self.btn_add)
        root.addLayout(bottom)

        self._notice_timer = QTimer(self)
        self._notice_timer.setSingleShot(True)
        self._notice_timer.timeout.connect(lambda: self.notice.setVisible(False))

        self._render(self._adapter.last_state)

    # ---------- UI sections ----------
    def _build_loading_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setAlignment(Qt.AlignCenter)

        spinner = QProgressBar()
        spinner.setRange(0, 0)
        spinner.setTextVisible(False)
        spinner.setFixedWidth(160)
        layout.addWidget(spinner, 0, Qt.AlignCenter)

        label = QLabel("Loading…")
        label.setObjectName("secondaryText")
        layout.addWidget(label, 0, Qt.AlignCenter)
        return page

    def _build_empty_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setAlignment(Qt.AlignCenter)

        self.empty_label = QLabel(EMPTY_TEXT)
        self.empty_label.setObjectName("secondaryText")
        self.empty_label.setWordWrap(True)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)
        return page

    def _build_list_page(self) -> QWidget:
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)

        container = QWidget()
        self._list_layout = QVBoxLayout(container)
        self._list_layout.setContentsMargins(0, 8, 0, 8)
        self._list_layout.setSpacing(12)
        self._list_layout.addStretch(1)

        scroll.setWidget(container)
        return scroll

    # ---------- Rendering ----------
    def _render(self, state_obj: object) -> None:
        state = state_obj
        assert isinstance(state, ActivityViewState)

        if state.loading:
            self._pages.setCurrentIndex(_PAGE_LOADING)
        elif state.is_empty:
            self.empty_label.setText(
                f"Could not load activities: {state.feed_error}"
                if state.feed_error
                else EMPTY_TEXT
            )
            self._pages.setCurrentIndex(_PAGE_EMPTY)
        else:
            self._rebuild_cards(state.items)
            self._pages.setCurrentIndex(_PAGE_LIST)

        if state.message:
            self._show_notice(state.message)
            self._adapter.request_message_shown.emit()

    def _rebuild_cards(self, items: tuple[ActivityRecord, ...]) -> None:
        # Remove everything but the trailing stretch.
        while self._list_layout.count() > 1:
            item = self._list_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()

        for index, record in enumerate(items):
            card = ActivityCard(record)
            card.toggle_requested.connect(self._adapter.request_toggle)
            card.edit_requested.connect(self._schedule_edit_dialog)
            card.delete_requested.connect(self._adapter.request_delete)
            self._list_layout.insertWidget(index, card)

    def _show_notice(self, message: str) -> None:
        self.notice.setText(message)
        self.notice.setVisible(True)
        self._notice_timer.start(NOTICE_TIMEOUT_MS)

    # ---------- Dialogs ----------
    def _open_add_dialog(self) -> None:
        dlg = ActivityDialog(self)
        if dlg.exec() == ActivityDialog.Accepted:
            res = dlg.result_value()
            if res is not None:
                self._adapter.request_add.emit(res.name)

    def _schedule_edit_dialog(self, record_obj: object) -> None:
        record = record_obj
        assert isinstance(record, ActivityRecord)
        # The card that emitted this may be rebuilt while the dialog is open,
        # so the dialog runs after its click handler has returned.
        QTimer.singleShot(0, lambda: self._open_edit_dialog(record))

    def _open_edit_dialog(self, record: ActivityRecord) -> None:
        dlg = ActivityDialog(self, initial_name=record.name)
        if dlg.exec() == ActivityDialog.Accepted:
            res = dlg.result_value()
            if res is not None:
                self._adapter.request_edit.emit(record, res.name)
