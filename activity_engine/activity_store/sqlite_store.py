"""
SQLite implementation of ActivityStore.

A local, single-process backend with the same live-snapshot contract as the
hosted collection. It backs the `sqlite` backend setting and is the store used
by the test suite.

Threading
---------
sqlite3 connections are opened per call and never shared. Listener callbacks
run synchronously on the thread that performed the mutation, after the write
has been committed. One delivery lock is held from the snapshot read through
the callbacks, and each subscription drops snapshots older than the last one it
received, so snapshots reach a subscriber in commit order.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path

from ..data_models import ActivityRecord, is_blank, require_name
from ..errors import PersistenceError, SubscriptionError
from .api import BaseSubscription, ErrorCallback, RecordId, SnapshotCallback
from .schema import SCHEMA_V1

logger = logging.getLogger(__name__)


class _SqliteSubscription(BaseSubscription):
    def __init__(
        self,
        store: "SqliteActivityStore",
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
    ) -> None:
        super().__init__()
        self._store = store
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.last_generation = -1

    def _release(self) -> None:
        self._store._unregister(self)


class SqliteActivityStore:
    """
    SQLite-backed ActivityStore.

    Parameters
    ----------
    db_path:
        Path to the SQLite database. Created if absent, along with its parent
        directory.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._delivery_lock = threading.RLock()
        self._generation = 0
        self._subscriptions: list[_SqliteSubscription] = []

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA_V1)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                conn.row_factory = sqlite3.Row
                with conn:
                    yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(str(exc)) from exc

    # ---------- Reads ----------
    def _read_snapshot(self) -> list[ActivityRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT doc_id, name, date, completed FROM activities "
                "ORDER BY date DESC, seq DESC"
            ).fetchall()
        return [
            ActivityRecord(
                record_id=str(r["doc_id"]),
                name=str(r["name"]),
                created_at=int(r["date"]),
                completed=bool(r["completed"]),
            )
            for r in rows
        ]

    # ---------- Subscriptions ----------
    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None = None
    ) -> _SqliteSubscription:
        """See ActivityStore.subscribe."""
        subscription = _SqliteSubscription(self, on_snapshot, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Opened subscription on %s", self.db_path)
        self._deliver([subscription])
        return subscription

    def _unregister(self, subscription: _SqliteSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        logger.debug("Closed subscription on %s", self.db_path)

    @property
    def open_subscriptions(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _notify(self) -> None:
        with self._lock:
            targets = list(self._subscriptions)
        if targets:
            self._deliver(targets)

    def _deliver(self, targets: list[_SqliteSubscription]) -> None:
        with self._delivery_lock:
            self._generation += 1
            generation = self._generation
            try:
                snapshot = self._read_snapshot()
            except PersistenceError as exc:
                logger.error("Failed to read snapshot from %s: %s", self.db_path, exc)
                failure = SubscriptionError(str(exc))
                for sub in self._fresh(targets, generation):
                    sub.on_snapshot([])
                    if sub.on_error is not None:
                        sub.on_error(failure)
                return

            for sub in self._fresh(targets, generation):
                sub.on_snapshot(list(snapshot))

    @staticmethod
    def _fresh(
        targets: list[_SqliteSubscription], generation: int
    ) -> Iterator[_SqliteSubscription]:
        # A callback may trigger a nested delivery on this thread; skip anyone
        # who has already seen a newer snapshot.
        for sub in targets:
            if sub.closed or sub.last_generation > generation:
                continue
            sub.last_generation = generation
            yield sub

    # ---------- Mutations ----------
    def create(self, record: ActivityRecord) -> None:
        """See ActivityStore.create."""
        require_name(record.name)
        doc_id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO activities(doc_id, name, date, completed) VALUES(?, ?, ?, ?)",
                (doc_id, record.name, int(record.created_at), int(record.completed)),
            )
        logger.info("Created activity %s", doc_id)
        self._notify()

    def set_completed(self, record_id: RecordId, value: bool) -> None:
        """See ActivityStore.set_completed."""
        self._update(record_id, "completed", int(bool(value)))

    def rename(self, record_id: RecordId, new_name: str) -> None:
        """See ActivityStore.rename."""
        if is_blank(new_name):
            return
        self._update(record_id, "name", new_name)

    def _update(self, record_id: RecordId, column: str, value: object) -> None:
        with self._connect() as conn:
            cur = conn.execute(
                f"UPDATE activities SET {column} = ? WHERE doc_id = ?",
                (value, record_id),
            )
            if cur.rowcount == 0:
                raise PersistenceError(f"No activity with id: {record_id}")
        logger.info("Updated %s of activity %s", column, record_id)
        self._notify()

    def delete(self, record_id: RecordId) -> None:
        """See ActivityStore.delete."""
        with self._connect() as conn:
            conn.execute("DELETE FROM activities WHERE doc_id = ?", (record_id,))
        logger.info("Deleted activity %s", record_id)
        self._notify()

