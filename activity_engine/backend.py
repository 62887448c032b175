"""
Backend bootstrap.

The hosted backend is initialized once per process through the Firebase Admin
SDK. Repeat calls reuse the default app. The resulting client is handed to the
store explicitly; stores never look up the global app themselves.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import firebase_admin
from firebase_admin import credentials
from firebase_admin import firestore as admin_firestore
from google.auth.exceptions import GoogleAuthError

from .activity_store.api import ActivityStore
from .activity_store.firestore_store import FirestoreActivityStore
from .activity_store.sqlite_store import SqliteActivityStore
from .errors import BackendConfigurationError
from .settings import BACKEND_FIRESTORE, BACKEND_SQLITE, AppSettings

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def _default_app(settings: AppSettings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    try:
        if settings.credentials_path is not None:
            cred = credentials.Certificate(str(settings.credentials_path))
        else:
            cred = credentials.ApplicationDefault()
    except (OSError, ValueError) as exc:
        raise BackendConfigurationError(f"Unusable credentials: {exc}") from exc

    options = {"projectId": settings.project_id} if settings.project_id else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info("Initialized Firebase app (project=%s)", settings.project_id or "<inferred>")
    return app


def initialize_backend(settings: AppSettings) -> Any:
    """
    Initialize the Firebase app once and return a Firestore client.

    Parameters
    ----------
    settings:
        Settings carrying the optional credentials path and project id.

    Returns
    -------
    google.cloud.firestore.Client
        Client bound to the default Firebase app.

    Raises
    ------
    BackendConfigurationError
        If credentials cannot be loaded or the project cannot be determined.
    """
    with _init_lock:
        app = _default_app(settings)
    try:
        return admin_firestore.client(app)
    except (ValueError, GoogleAuthError) as exc:
        raise BackendConfigurationError(f"Cannot create Firestore client: {exc}") from exc


def open_activity_store(settings: AppSettings, client: Any | None = None) -> ActivityStore:
    """
    Build the store selected by settings.

    Parameters
    ----------
    settings:
        Application settings.
    client:
        Optional pre-built Firestore client. When None and the backend is
        Firestore, `initialize_backend` is called.

    Returns
    -------
    ActivityStore
        Ready-to-use store.
    """
    if settings.backend == BACKEND_SQLITE:
        path = settings.resolved_sqlite_path()
        logger.info("Using local activity store at %s", path)
        return SqliteActivityStore(db_path=path)

    if settings.backend == BACKEND_FIRESTORE:
        fs_client = client if client is not None else initialize_backend(settings)
        logger.info("Using Firestore collection %r", settings.collection)
        return FirestoreActivityStore(client=fs_client, collection=settings.collection)

    raise BackendConfigurationError(f"Unknown backend: {settings.backend!r}")
