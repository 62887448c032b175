"""
Activity list GUI app.

Single-screen window backed by the engine projector and the configured store.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMessageBox, QVBoxLayout, QWidget

from activity_engine.activity_store.api import ActivityStore
from activity_engine.backend import open_activity_store
from activity_engine.errors import ActivityError
from activity_engine.log_setup import configure_logging
from activity_engine.settings import AppSettings, load_settings
from gui.adapters.activity_projector_adapter import ActivityProjectorAdapter
from gui.screens.activity_list_screen import ActivityListScreen
from gui.theme import APP_STYLESHEET

logger = logging.getLogger(__name__)


class AppWindow(QWidget):
    """
    Main window.

    Responsibilities
    ----------------
    - Host the activity list screen
    - Release the live subscription when the window closes
    """

    def __init__(self, store: ActivityStore) -> None:
        super().__init__()
        self.setWindowTitle("Activities")
        self.resize(480, 720)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        self.adapter = ActivityProjectorAdapter(store)
        self.screen = ActivityListScreen(self.adapter)
        root.addWidget(self.screen)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """
        Handle window close by shutting down the projector worker.

        Parameters
        ----------
        event:
            Qt close event.
        """
        try:
            self.adapter.shutdown()
        finally:
            super().closeEvent(event)


def main(
    settings: AppSettings | None = None,
    settings_file: Path | None = None,
    log_level: str = "INFO",
) -> int:
    """
    Run the GUI application.

    Parameters
    ----------
    settings:
        Settings to use. Loaded from `settings_file` (or the default location)
        when None.
    settings_file:
        Optional settings path used when `settings` is None.
    log_level:
        Root logger level.

    Returns
    -------
    int
        Qt application exit code, or 2 if the backend cannot be opened.
    """
    configure_logging(log_level)
    resolved = settings if settings is not None else load_settings(settings_file)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyleSheet(APP_STYLESHEET)

    try:
        store = open_activity_store(resolved)
    except ActivityError as exc:
        logger.error("Cannot open activity store: %s", exc)
        QMessageBox.critical(None, "Activities", f"Cannot open activity store:\n\n{exc}")
        return 2

    w = AppWindow(store)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
