"""
Add/Edit activity dialog (UI only).

Purpose
-------
- Collect a single activity name for add and edit.
- Keep the confirm button disabled while the name is blank.

Notes
-----
- The dialog performs no persistence. Callers forward the result to the
  projector, which repeats the blank-name check before any write.
"""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from activity_engine.data_models import is_blank


@dataclass(frozen=True, slots=True)
class ActivityDialogResult:
    """
    Result payload returned by ActivityDialog.

    Attributes
    ----------
    name:
        Name entered by the user, exactly as typed.
    """

    name: str


class ActivityDialog(QDialog):
    """
    Modal form for adding or editing one activity name.

    Editing mode is inferred from a non-empty initial value.
    """

    def __init__(self, parent: QWidget | None = None, *, initial_name: str = "") -> None:
        """
        Initialize the dialog.

        Parameters
        ----------
        parent:
            Optional parent widget.
        initial_name:
            Current name when editing; empty when adding.
        """
        super().__init__(parent)
        self.is_editing = bool(initial_name)
        self.setWindowTitle("Edit activity" if self.is_editing else "New activity")
        self.setModal(True)
        self.resize(420, 140)

        self._result: ActivityDialogResult | None = None

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)

        root.addWidget(QLabel("Activity name"))

        self.name_edit = QLineEdit()
        self.name_edit.setText(initial_name)
        self.name_edit.setPlaceholderText("Example: Buy milk")
        root.addWidget(self.name_edit)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Cancel)
        self.btn_confirm = self.buttons.addButton(
            "Save" if self.is_editing else "Add", QDialogButtonBox.AcceptRole
        )
        self.buttons.rejected.connect(self.reject)
        self.btn_confirm.clicked.connect(self._on_confirm)
        root.addWidget(self.buttons)

        self.name_edit.textChanged.connect(self._sync_state)
        self.name_edit.returnPressed.connect(self._on_confirm)
        self._sync_state()

    def result_value(self) -> ActivityDialogResult | None:
        return self._result

    def _sync_state(self) -> None:
        self.btn_confirm.setEnabled(not is_blank(self.name_edit.text()))

    def _on_confirm(self) -> None:
        text = self.name_edit.text()
        if is_blank(text):
            return
        self._result = ActivityDialogResult(name=text)
        self.accept()
