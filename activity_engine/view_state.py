"""
View-state projection for the activity list screen.

The projector is the single in-process owner of what the screen shows. It holds
one live subscription to the store and rebuilds `items` from every snapshot.
Mutation intents are write-only: they call the store and report the outcome as
a transient message, but never touch `items`. The displayed list only changes
when the store pushes the next snapshot.

States
------
- Initializing: loading=True, items=()
- Ready: loading=False, items=<latest snapshot>
- Closed: subscription released; later snapshots are ignored
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Final

from .activity_store.api import ActivityStore, Subscription
from .clock import Clock, SystemClock
from .data_models import ActivityRecord, is_blank
from .errors import PersistenceError, SubscriptionError, ValidationError

logger = logging.getLogger(__name__)

MSG_NAME_REQUIRED: Final[str] = "Activity name must not be empty."
MSG_ADDED: Final[str] = "Activity added."
MSG_UPDATED: Final[str] = "Activity updated."
MSG_DELETED: Final[str] = "Activity deleted."


@dataclass(frozen=True, slots=True)
class ActivityViewState:
    """
    Immutable view of the screen state.

    Attributes
    ----------
    items:
        Latest snapshot, newest first.
    loading:
        True until the first snapshot arrives.
    message:
        One-shot notice for the user, cleared by `message_shown`.
    feed_error:
        Set while the live feed is broken, so a broken feed is not mistaken for
        an empty collection.
    """

    items: tuple[ActivityRecord, ...] = ()
    loading: bool = True
    message: str | None = None
    feed_error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.items


StateListener = Callable[[ActivityViewState], None]


class ActivityProjector:
    """
    Projects store snapshots into ActivityViewState and forwards user intents.

    Parameters
    ----------
    store:
        Persistence adapter. The projector is its only caller.
    clock:
        Time source for new records.
    """

    def __init__(self, store: ActivityStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._lock = threading.Lock()
        self._state = ActivityViewState()
        self._listeners: list[StateListener] = []
        self._subscription: Subscription | None = None
        self._started = False
        self._closed = False

    # ---------- Observation ----------
    @property
    def state(self) -> ActivityViewState:
        with self._lock:
            return self._state

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a state listener.

        Listeners run after every state change. An exception raised by a
        listener is logged and does not reach the projector's caller.

        Returns
        -------
        Callable[[], None]
            Function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def _transition(self, update: Callable[[ActivityViewState], ActivityViewState]) -> None:
        with self._lock:
            if self._closed:
                return
            new_state = update(self._state)
            if new_state == self._state:
                return
            self._state = new_state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    # ---------- Lifecycle ----------
    def start(self) -> None:
        """Open the live subscription. Calling it again has no effect."""
        with self._lock:
            if self._started or self._closed:
                return
            self._started = True
        logger.debug("Projector subscribing to store")
        subscription = self._store.subscribe(self._on_snapshot, self._on_feed_error)
        with self._lock:
            if not self._closed:
                self._subscription = subscription
                return
        subscription.close()

    def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscription, self._subscription = self._subscription, None
            self._listeners.clear()
        if subscription is not None:
            subscription.close()
        logger.debug("Projector closed")

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    # ---------- Snapshot feed ----------
    def _on_snapshot(self, records: list[ActivityRecord]) -> None:
        items = tuple(records)
        self._transition(lambda s: replace(s, items=items, loading=False, feed_error=None))

    def _on_feed_error(self, exc: SubscriptionError) -> None:
        text = str(exc) or exc.__class__.__name__
        self._transition(lambda s: replace(s, items=(), loading=False, feed_error=text))

    def _set_message(self, message: str) -> None:
        self._transition(lambda s: replace(s, message=message))

    # ---------- Intents ----------
    def request_add(self, name: str) -> None:
        """Create a record named `name`; blank names only produce a notice."""
        if is_blank(name):
            self._set_message(MSG_NAME_REQUIRED)
            return
        try:
            self._store.create(ActivityRecord.new(name, self._clock))
        except (ValidationError, PersistenceError) as exc:
            logger.warning("Add failed: %s", exc)
            self._set_message(f"Failed to add: {exc}")
            return
        self._set_message(MSG_ADDED)

    def request_toggle(self, record: ActivityRecord) -> None:
        """Flip the completion flag of `record`."""
        try:
            self._store.set_completed(record.record_id, not record.completed)
        except PersistenceError as exc:
            logger.warning("Toggle of %s failed: %s", record.record_id, exc)
            self._set_message(f"Failed to update status: {exc}")

    def request_edit(self, record: ActivityRecord, new_name: str) -> None:
        """Rename `record`; blank or unchanged names are dropped silently."""
        if is_blank(new_name) or new_name == record.name:
            return
        try:
            self._store.rename(record.record_id, new_name)
        except PersistenceError as exc:
            logger.warning("Edit of %s failed: %s", record.record_id, exc)
            self._set_message(f"Failed to edit: {exc}")
            return
        self._set_message(MSG_UPDATED)

    def request_delete(self, record: ActivityRecord) -> None:
        """Delete `record`."""
        try:
            self._store.delete(record.record_id)
        except PersistenceError as exc:
            logger.warning("Delete of %s failed: %s", record.record_id, exc)
            self._set_message(f"Failed to delete: {exc}")
            return
        self._set_message(MSG_DELETED)

    def message_shown(self) -> None:
        """Clear the transient message after the UI has displayed it."""
        self._transition(lambda s: replace(s, message=None))
