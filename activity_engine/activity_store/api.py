"""
ActivityStore public API.

This module defines the persistence surface. ActivityProjector is its only
caller inside the application. Callers speak only in ActivityRecord values;
backend client types never cross this boundary.

Notes
-----
- Every snapshot is the entire collection ordered by creation time, newest
  first. Snapshots are never diffs.
- Mutations are write-only. Their effect becomes visible through the next
  snapshot of an open subscription.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, Iterator, Protocol

from ..data_models import ActivityRecord
from ..errors import SubscriptionError

logger = logging.getLogger(__name__)

RecordId = str
SnapshotCallback = Callable[[list[ActivityRecord]], None]
ErrorCallback = Callable[[SubscriptionError], None]


class Subscription(Protocol):
    """Handle to an open live listener."""

    def close(self) -> None:
        """
        Release the listener.

        Safe to call more than once; only the first call has an effect.
        """
        raise NotImplementedError

    def __enter__(self) -> "Subscription":
        raise NotImplementedError

    def __exit__(self, *exc_info: object) -> None:
        raise NotImplementedError


class ActivityStore(Protocol):
    """
    Persistence API for activity records.

    Implementations must wrap every backend failure in PersistenceError.
    """

    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None = None
    ) -> Subscription:
        """
        Open a live listener on the collection.

        Parameters
        ----------
        on_snapshot:
            Called with the full, ordered collection after every change,
            starting with the current contents.
        on_error:
            Called with a SubscriptionError when the feed fails. The failure is
            also delivered to on_snapshot as an empty list.

        Returns
        -------
        Subscription
            Handle that must be closed exactly once by the caller.
        """
        raise NotImplementedError

    def create(self, record: ActivityRecord) -> None:
        """
        Persist a new record. The store assigns the identifier.

        Raises
        ------
        ValidationError
            If the record name is blank.
        PersistenceError
            If the backend rejects the write.
        """
        raise NotImplementedError

    def set_completed(self, record_id: RecordId, value: bool) -> None:
        """Update only the completion flag of record_id."""
        raise NotImplementedError

    def rename(self, record_id: RecordId, new_name: str) -> None:
        """Update only the name of record_id. Blank names are ignored."""
        raise NotImplementedError

    def delete(self, record_id: RecordId) -> None:
        """Remove record_id. Removing an unknown id is not an error."""
        raise NotImplementedError


class BaseSubscription:
    """Subscription base that tracks closure and makes close() idempotent."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        """Release backend resources. Called at most once."""

    def __enter__(self) -> "BaseSubscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def iter_snapshots(
    store: ActivityStore, timeout: float | None = None
) -> Iterator[list[ActivityRecord]]:
    """
    Yield snapshots from a fresh subscription as they arrive.

    The subscription is opened on first iteration and closed when the
    generator is closed, exhausted or garbage collected.

    Parameters
    ----------
    store:
        Store to subscribe to.
    timeout:
        Maximum seconds to wait for the next snapshot. None waits forever.
        When the wait times out the generator ends.

    Yields
    ------
    list[ActivityRecord]
        Full collection snapshots, newest first.
    """
    pending: queue.Queue[list[ActivityRecord]] = queue.Queue()

    def _on_error(exc: SubscriptionError) -> None:
        logger.warning("Snapshot feed failed: %s", exc)

    subscription = store.subscribe(pending.put, _on_error)
    try:
        while True:
            try:
                snapshot = pending.get(timeout=timeout)
            except queue.Empty:
                return
            yield snapshot
    finally:
        subscription.close()
