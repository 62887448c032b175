from __future__ import annotations

import threading
import time
from typing import Any, Callable

import pytest
from google.api_core.exceptions import NotFound, PermissionDenied, ServiceUnavailable
from google.cloud import firestore

from activity_engine.activity_store.firestore_store import FirestoreActivityStore
from activity_engine.clock import FixedClock
from activity_engine.data_models import ActivityRecord
from activity_engine.errors import PersistenceError, SubscriptionError, ValidationError


class _FakeSnapshot:
    def __init__(self, doc_id: str, data: dict[str, Any]) -> None:
        self.id = doc_id
        self._data = data

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class _FakeWatch:
    def __init__(self) -> None:
        self.unsubscribe_calls = 0
        self.is_active = True

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        self.is_active = False


class _FakeQuery:
    def __init__(self, collection: "_FakeCollection", field: str, direction: str) -> None:
        self.collection = collection
        self.field = field
        self.direction = direction

    def on_snapshot(self, callback: Callable[..., None]) -> _FakeWatch:
        if self.collection.listen_error is not None:
            raise self.collection.listen_error
        self.collection.callbacks.append(callback)
        watch = _FakeWatch()
        self.collection.watches.append(watch)
        return watch


class _FakeDocument:
    def __init__(self, collection: "_FakeCollection", doc_id: str) -> None:
        self.collection = collection
        self.id = doc_id

    def update(self, fields: dict[str, Any]) -> None:
        self.collection.calls.append(("update", self.id, fields))
        if self.collection.write_error is not None:
            raise self.collection.write_error

    def delete(self) -> None:
        self.collection.calls.append(("delete", self.id))
        if self.collection.write_error is not None:
            raise self.collection.write_error


class _FakeCollection:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.callbacks: list[Callable[..., None]] = []
        self.watches: list[_FakeWatch] = []
        self.queries: list[_FakeQuery] = []
        self.write_error: Exception | None = None
        self.listen_error: Exception | None = None

    def order_by(self, field: str, direction: str) -> _FakeQuery:
        query = _FakeQuery(self, field, direction)
        self.queries.append(query)
        return query

    def add(self, doc: dict[str, Any]) -> tuple[object, _FakeDocument]:
        self.calls.append(("add", doc))
        if self.write_error is not None:
            raise self.write_error
        return object(), _FakeDocument(self, f"generated-{len(self.calls)}")

    def document(self, doc_id: str) -> _FakeDocument:
        return _FakeDocument(self, doc_id)

    def push(self, docs: list[_FakeSnapshot]) -> None:
        for callback in list(self.callbacks):
            callback(docs, [], None)


class _FakeClient:
    def __init__(self) -> None:
        self.collections: dict[str, _FakeCollection] = {}

    def collection(self, name: str) -> _FakeCollection:
        return self.collections.setdefault(name, _FakeCollection())


@pytest.fixture
def client() -> _FakeClient:
    return _FakeClient()


@pytest.fixture
def store(client: _FakeClient) -> FirestoreActivityStore:
    return FirestoreActivityStore(client=client, liveness_interval=0.01)


def test_subscribe_orders_by_date_descending(client: _FakeClient, store: FirestoreActivityStore) -> None:
    with store.subscribe(lambda _records: None):
        (query,) = client.collection("activities").queries

    assert query.field == "date"
    assert query.direction == firestore.Query.DESCENDING


def test_snapshot_documents_are_decoded_with_their_ids(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    received: list[list[ActivityRecord]] = []
    with store.subscribe(received.append):
        client.collection("activities").push(
            [
                _FakeSnapshot("b", {"name": "Newer", "date": 20, "completed": True}),
                _FakeSnapshot("a", {"name": "Older", "date": 10, "completed": False}),
            ]
        )

    assert received == [
        [
            ActivityRecord(record_id="b", name="Newer", created_at=20, completed=True),
            ActivityRecord(record_id="a", name="Older", created_at=10, completed=False),
        ]
    ]


def test_malformed_documents_are_skipped(client: _FakeClient, store: FirestoreActivityStore) -> None:
    received: list[list[ActivityRecord]] = []
    with store.subscribe(received.append):
        client.collection("activities").push(
            [
                _FakeSnapshot("bad", {"name": "Bad", "date": "not-a-number"}),
                _FakeSnapshot("ok", {"name": "Ok", "date": 1}),
            ]
        )

    assert [r.record_id for r in received[0]] == ["ok"]


def test_close_unsubscribes_once_and_ignores_late_snapshots(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    received: list[list[ActivityRecord]] = []
    sub = store.subscribe(received.append)
    sub.close()
    sub.close()

    collection = client.collection("activities")
    collection.push([_FakeSnapshot("late", {"name": "Late", "date": 1})])

    assert collection.watches[0].unsubscribe_calls == 1
    assert received == []


def test_listen_failure_delivers_empty_list_and_subscription_error(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    client.collection("activities").listen_error = PermissionDenied("missing permissions")
    received: list[list[ActivityRecord]] = []
    errors: list[SubscriptionError] = []

    sub = store.subscribe(received.append, errors.append)
    sub.close()

    assert received == [[]]
    assert len(errors) == 1
    assert "missing permissions" in str(errors[0])


def test_create_lets_the_store_assign_the_id(client: _FakeClient, store: FirestoreActivityStore) -> None:
    store.create(ActivityRecord.new("Buy milk", FixedClock(123)))

    assert client.collection("activities").calls == [
        ("add", {"name": "Buy milk", "date": 123, "completed": False})
    ]


def test_create_rejects_blank_name_without_a_network_call(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    with pytest.raises(ValidationError):
        store.create(ActivityRecord(name=" ", created_at=1))

    assert client.collection("activities").calls == []


def test_field_scoped_updates(client: _FakeClient, store: FirestoreActivityStore) -> None:
    store.set_completed("doc-1", True)
    store.rename("doc-1", "New name")
    store.delete("doc-1")

    assert client.collection("activities").calls == [
        ("update", "doc-1", {"completed": True}),
        ("update", "doc-1", {"name": "New name"}),
        ("delete", "doc-1"),
    ]


def test_rename_with_blank_name_makes_no_call(client: _FakeClient, store: FirestoreActivityStore) -> None:
    store.rename("doc-1", "   ")

    assert client.collection("activities").calls == []


@pytest.mark.parametrize(
    "error",
    [NotFound("no document"), PermissionDenied("denied"), ServiceUnavailable("offline")],
)
def test_backend_errors_become_persistence_errors(
    client: _FakeClient, store: FirestoreActivityStore, error: Exception
) -> None:
    client.collection("activities").write_error = error

    with pytest.raises(PersistenceError):
        store.create(ActivityRecord.new("x", FixedClock(1)))
    with pytest.raises(PersistenceError):
        store.set_completed("doc-1", False)
    with pytest.raises(PersistenceError):
        store.delete("doc-1")


def test_custom_collection_name(client: _FakeClient) -> None:
    store = FirestoreActivityStore(client=client, collection="todo")
    store.delete("doc-9")

    assert client.collection("todo").calls == [("delete", "doc-9")]
    assert "activities" not in client.collections


def test_listener_that_stops_on_its_own_delivers_empty_list_and_subscription_error(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    received: list[list[ActivityRecord]] = []
    errors: list[SubscriptionError] = []
    failed = threading.Event()

    def _on_error(exc: SubscriptionError) -> None:
        errors.append(exc)
        failed.set()

    with store.subscribe(received.append, _on_error):
        collection = client.collection("activities")
        collection.push([_FakeSnapshot("a", {"name": "Walk", "date": 1})])
        collection.watches[0].is_active = False
        assert failed.wait(timeout=5)

    assert [r.name for r in received[0]] == ["Walk"]
    assert received[-1] == []
    assert len(errors) == 1
    assert "stopped unexpectedly" in str(errors[0])


def test_closing_the_subscription_is_not_reported_as_a_failure(
    client: _FakeClient, store: FirestoreActivityStore
) -> None:
    received: list[list[ActivityRecord]] = []
    errors: list[SubscriptionError] = []

    sub = store.subscribe(received.append, errors.append)
    sub.close()
    time.sleep(0.1)

    assert client.collection("activities").watches[0].is_active is False
    assert received == []
    assert errors == []
