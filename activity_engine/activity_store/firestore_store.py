"""
Cloud Firestore implementation of ActivityStore.

The store wraps one collection of a client injected by the caller; it never
reaches for a process-wide client itself. Obtain the client from
`activity_engine.backend.initialize_backend`, or pass a double in tests.

Threading
---------
Firestore delivers snapshots on its own watch thread. Callbacks passed to
`subscribe` therefore run off the caller's thread and must be thread-safe.

Listener failures
-----------------
The client library ends a failed listen stream by closing its watch on a
background thread without calling the snapshot callback. Each subscription
runs a small monitor that polls `Watch.is_active`; a watch that stops while the
subscription is still open is reported as a feed failure.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Final, Sequence

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore

from ..data_models import (
    FIELD_COMPLETED,
    FIELD_DATE,
    FIELD_NAME,
    ActivityRecord,
    is_blank,
    require_name,
)
from ..errors import PersistenceError, SubscriptionError
from .api import BaseSubscription, ErrorCallback, RecordId, SnapshotCallback

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION: Final[str] = "activities"
DEFAULT_LIVENESS_INTERVAL: Final[float] = 1.0

# Errors raised by the client library that are translated to PersistenceError.
_BACKEND_ERRORS: Final[tuple[type[Exception], ...]] = (GoogleAPIError, GoogleAuthError)


class _FirestoreSubscription(BaseSubscription):
    def __init__(self) -> None:
        super().__init__()
        self._watch: Any | None = None
        self._stop = threading.Event()

    def attach(self, watch: Any, on_stopped: Callable[[], None], interval: float) -> None:
        """Take ownership of `watch` and start monitoring it."""
        self._watch = watch
        monitor = threading.Thread(
            target=self._monitor,
            args=(watch, on_stopped, interval),
            name="activity-watch-monitor",
            daemon=True,
        )
        monitor.start()

    def _monitor(self, watch: Any, on_stopped: Callable[[], None], interval: float) -> None:
        while not self._stop.wait(interval):
            if watch.is_active:
                continue
            if not self.closed:
                on_stopped()
            return

    def _release(self) -> None:
        self._stop.set()
        if self._watch is None:
            return
        try:
            self._watch.unsubscribe()
        except _BACKEND_ERRORS as exc:
            logger.warning("Error while closing snapshot listener: %s", exc)
        finally:
            self._watch = None


def _decode_documents(docs: Sequence[Any]) -> list[ActivityRecord]:
    records: list[ActivityRecord] = []
    for doc in docs:
        try:
            records.append(ActivityRecord.from_document(doc.id, doc.to_dict()))
        except ValueError as exc:
            logger.warning("Skipping malformed activity document %s: %s", doc.id, exc)
    return records


class FirestoreActivityStore:
    """
    Firestore-backed ActivityStore.

    Parameters
    ----------
    client:
        A `google.cloud.firestore.Client` (or compatible double).
    collection:
        Name of the collection holding activity documents.
    liveness_interval:
        Seconds between checks that an open listener is still running.
    """

    def __init__(
        self,
        client: Any,
        collection: str = DEFAULT_COLLECTION,
        liveness_interval: float = DEFAULT_LIVENESS_INTERVAL,
    ) -> None:
        self._client = client
        self.collection_name = collection
        self.liveness_interval = liveness_interval

    def _collection(self) -> Any:
        return self._client.collection(self.collection_name)

    def _document(self, record_id: RecordId) -> Any:
        return self._collection().document(record_id)

    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None = None
    ) -> _FirestoreSubscription:
        """See ActivityStore.subscribe."""

        def _fail(reason: str) -> None:
            logger.error("Listener on %r failed: %s", self.collection_name, reason)
            on_snapshot([])
            if on_error is not None:
                on_error(SubscriptionError(reason))

        def _callback(docs: Sequence[Any], _changes: Any, _read_time: Any) -> None:
            if subscription.closed:
                return
            on_snapshot(_decode_documents(docs))

        def _stopped() -> None:
            _fail(f"Snapshot listener on {self.collection_name!r} stopped unexpectedly.")

        subscription = _FirestoreSubscription()
        query = self._collection().order_by(FIELD_DATE, direction=firestore.Query.DESCENDING)
        try:
            watch = query.on_snapshot(_callback)
        except _BACKEND_ERRORS as exc:
            _fail(str(exc))
            return subscription

        subscription.attach(watch, _stopped, self.liveness_interval)
        logger.debug("Opened snapshot listener on %r", self.collection_name)
        return subscription

    def create(self, record: ActivityRecord) -> None:
        """See ActivityStore.create."""
        require_name(record.name)
        try:
            _update_time, ref = self._collection().add(record.to_document())
        except _BACKEND_ERRORS as exc:
            raise PersistenceError(str(exc)) from exc
        logger.info("Created activity %s", getattr(ref, "id", "?"))

    def set_completed(self, record_id: RecordId, value: bool) -> None:
        """See ActivityStore.set_completed."""
        self._update(record_id, {FIELD_COMPLETED: bool(value)})

    def rename(self, record_id: RecordId, new_name: str) -> None:
        """See ActivityStore.rename."""
        if is_blank(new_name):
            return
        self._update(record_id, {FIELD_NAME: new_name})

    def _update(self, record_id: RecordId, fields: dict[str, Any]) -> None:
        try:
            self._document(record_id).update(fields)
        except _BACKEND_ERRORS as exc:
            raise PersistenceError(str(exc)) from exc
        logger.info("Updated %s of activity %s", ", ".join(sorted(fields)), record_id)

    def delete(self, record_id: RecordId) -> None:
        """See ActivityStore.delete."""
        try:
            self._document(record_id).delete()
        except _BACKEND_ERRORS as exc:
            raise PersistenceError(str(exc)) from exc
        logger.info("Deleted activity %s", record_id)
