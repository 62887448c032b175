"""Qt adapter for the engine ActivityProjector.

The engine owns persistence and view-state projection. The GUI talks to this
adapter via signals/slots so store calls never block the UI thread.

Threading model
--------------
- A single worker QObject lives on a dedicated QThread.
- The worker owns the ActivityProjector and therefore the live subscription.
- Intents are queued onto the worker; state changes come back as a queued
  signal carrying an immutable ActivityViewState.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot

from activity_engine.activity_store.api import ActivityStore
from activity_engine.data_models import ActivityRecord
from activity_engine.view_state import ActivityProjector, ActivityViewState

logger = logging.getLogger(__name__)


class ActivityProjectorWorker(QObject):
    """Worker that owns the projector and runs in a background thread."""

    state_changed = Signal(object)  # ActivityViewState

    def __init__(self, store: ActivityStore) -> None:
        super().__init__()
        self._projector = ActivityProjector(store)
        self._projector.add_listener(self.state_changed.emit)

    @property
    def projector(self) -> ActivityProjector:
        return self._projector

    @Slot()
    def start(self) -> None:
        """Open the live subscription and publish the initial state."""
        self.state_changed.emit(self._projector.state)
        self._projector.start()

    @Slot(str)
    def add(self, name: str) -> None:
        self._projector.request_add(name)

    @Slot(object)
    def toggle(self, record: object) -> None:
        assert isinstance(record, ActivityRecord)
        self._projector.request_toggle(record)

    @Slot(object, str)
    def edit(self, record: object, new_name: str) -> None:
        assert isinstance(record, ActivityRecord)
        self._projector.request_edit(record, new_name)

    @Slot(object)
    def delete(self, record: object) -> None:
        assert isinstance(record, ActivityRecord)
        self._projector.request_delete(record)

    @Slot()
    def message_shown(self) -> None:
        self._projector.message_shown()


class ActivityProjectorAdapter(QObject):
    """Qt adapter that marshals projector intents onto a worker thread."""

    # Requests (GUI emits these; wired as queued connections to worker slots)
    request_add = Signal(str)
    request_toggle = Signal(object)
    request_edit = Signal(object, str)
    request_delete = Signal(object)
    request_message_shown = Signal()

    # Results (worker emits; adapter forwards)
    state_changed = Signal(object)  # ActivityViewState

    def __init__(self, store: ActivityStore) -> None:
        super().__init__()
        self._last_state = ActivityViewState()
        self._is_shut_down = False

        self._thread = QThread()
        self._worker = ActivityProjectorWorker(store)
        self._worker.moveToThread(self._thread)

        # Queue requests onto worker thread.
        self.request_add.connect(self._worker.add, type=Qt.ConnectionType.QueuedConnection)
        self.request_toggle.connect(self._worker.toggle, type=Qt.ConnectionType.QueuedConnection)
        self.request_edit.connect(self._worker.edit, type=Qt.ConnectionType.QueuedConnection)
        self.request_delete.connect(self._worker.delete, type=Qt.ConnectionType.QueuedConnection)
        self.request_message_shown.connect(
            self._worker.message_shown, type=Qt.ConnectionType.QueuedConnection
        )

        # Forward results to GUI thread.
        self._worker.state_changed.connect(
            self._on_worker_state, type=Qt.ConnectionType.QueuedConnection
        )

        self._thread.started.connect(self._worker.start)
        self._thread.start()

    @property
    def last_state(self) -> ActivityViewState:
        return self._last_state

    @Slot(object)
    def _on_worker_state(self, state: object) -> None:
        assert isinstance(state, ActivityViewState)
        self._last_state = state
        self.state_changed.emit(state)

    def shutdown(self) -> None:
        """
        Close the subscription and stop the worker thread.

        Notes
        -----
        This method is safe to call multiple times.
        """
        if self._is_shut_down:
            return
        self._is_shut_down = True

        # Projector state is lock-protected, so close from the UI thread.
        self._worker.projector.close()
        self._thread.quit()
        self._thread.wait()
        logger.debug("Activity projector adapter shut down")
