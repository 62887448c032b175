"""
Command-line interface for the activity list.

Notes
-----
The CLI is intentionally thin. It parses arguments, builds the configured store
and drives an ActivityProjector, the same component the GUI uses. Commands never
call the store themselves; they issue projector intents and report the
resulting message.

Exit codes
----------
- 0: success
- 1: the requested record id does not exist
- 2: domain error (validation, persistence, configuration) or a failed intent
"""

from __future__ import annotations

import argparse
import queue
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Final

from activity_engine.activity_store.api import ActivityStore
from activity_engine.backend import open_activity_store
from activity_engine.data_models import ActivityRecord, is_blank
from activity_engine.errors import ActivityError, SubscriptionError
from activity_engine.formatting import format_created_at
from activity_engine.log_setup import LOG_LEVELS, configure_logging
from activity_engine.settings import BACKENDS, AppSettings, load_settings, save_settings
from activity_engine.view_state import (
    MSG_ADDED,
    MSG_DELETED,
    MSG_NAME_REQUIRED,
    MSG_UPDATED,
    ActivityProjector,
    ActivityViewState,
    StateListener,
)

DEFAULT_TIMEOUT_SECONDS = 15.0

_SUCCESS_MESSAGES: Final[frozenset[str]] = frozenset({MSG_ADDED, MSG_UPDATED, MSG_DELETED})


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="activities",
        description="Track a personal list of activities",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings JSON file. If omitted, the default data root is used.",
    )
    parser.add_argument(
        "--backend",
        choices=sorted(BACKENDS),
        default=None,
        help="Override the backend from settings.",
    )
    parser.add_argument(
        "--sqlite-path",
        type=Path,
        default=None,
        help="Override the local SQLite database path (sqlite backend only).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help="Seconds to wait for the first snapshot (default: 15).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Print the current activities, newest first")

    add_p = sub.add_parser("add", help="Add an activity")
    add_p.add_argument("name", help="Activity name")

    toggle_p = sub.add_parser("toggle", help="Flip the completion flag of an activity")
    toggle_p.add_argument("record_id", help="Activity id")

    rename_p = sub.add_parser("rename", help="Rename an activity")
    rename_p.add_argument("record_id", help="Activity id")
    rename_p.add_argument("name", help="New activity name")

    delete_p = sub.add_parser("delete", help="Delete an activity")
    delete_p.add_argument("record_id", help="Activity id")

    watch_p = sub.add_parser("watch", help="Print every snapshot as it arrives")
    watch_p.add_argument(
        "--count",
        type=int,
        default=None,
        help="Stop after this many snapshots. Runs until interrupted if omitted.",
    )

    config_p = sub.add_parser("config", help="Show the effective settings")
    config_p.add_argument(
        "--save",
        action="store_true",
        help="Write the effective settings (including overrides) to the settings file.",
    )

    sub.add_parser("gui", help="Open the desktop application")

    return parser


def _resolve_settings(args: argparse.Namespace) -> AppSettings:
    settings = load_settings(args.settings)
    if args.backend is not None:
        settings = settings.with_backend(args.backend)
    if args.sqlite_path is not None:
        settings = replace(settings, sqlite_path=args.sqlite_path)
    return settings


def format_record(record: ActivityRecord) -> str:
    mark = "x" if record.completed else " "
    return f"[{mark}] {record.record_id}  {format_created_at(record.created_at)}  {record.name}"


@contextmanager
def _running_projector(
    store: ActivityStore, timeout: float, listener: StateListener | None = None
) -> Iterator[ActivityProjector]:
    """
    Start a projector over `store` and wait until it has a first snapshot.

    Raises
    ------
    ActivityError
        If no snapshot arrives within `timeout` seconds.
    SubscriptionError
        If the live feed failed.
    """
    projector = ActivityProjector(store)
    ready = threading.Event()

    def _on_state(state: ActivityViewState) -> None:
        if not state.loading:
            ready.set()

    projector.add_listener(_on_state)
    if listener is not None:
        projector.add_listener(listener)
    try:
        projector.start()
        if not ready.wait(timeout):
            raise ActivityError(f"No snapshot received within {timeout:g}s.")
        feed_error = projector.state.feed_error
        if feed_error is not None:
            raise SubscriptionError(f"Could not load activities: {feed_error}")
        yield projector
    finally:
        projector.close()


def _find(projector: ActivityProjector, record_id: str) -> ActivityRecord | None:
    return next((r for r in projector.state.items if r.record_id == record_id), None)


def _not_found(record_id: str) -> int:
    print(f"ERROR: No activity with id: {record_id}")
    return 1


def _report(projector: ActivityProjector, fallback: str) -> int:
    message = projector.state.message
    if message is not None and message not in _SUCCESS_MESSAGES:
        print(f"ERROR: {message}")
        return 2
    print(message or fallback)
    return 0


def _print_snapshot(records: tuple[ActivityRecord, ...]) -> None:
    if not records:
        print("No activities yet.")
        return
    for record in records:
        print(format_record(record))


def _watch(store: ActivityStore, timeout: float, count: int | None) -> int:
    states: queue.Queue[ActivityViewState] = queue.Queue()
    with _running_projector(store, timeout, states.put):
        seen = 0
        while count is None or seen < count:
            state = states.get()
            if state.loading:
                continue
            if state.feed_error is not None:
                print(f"--- feed error: {state.feed_error}")
            else:
                print(f"--- snapshot ({len(state.items)} activities)")
                _print_snapshot(state.items)
            seen += 1
    return 0


def _run_command(args: argparse.Namespace, store: ActivityStore) -> int:
    if args.command == "watch":
        return _watch(store, args.timeout, args.count)

    if args.command in ("add", "rename") and is_blank(args.name):
        print(f"ERROR: {MSG_NAME_REQUIRED}")
        return 2

    with _running_projector(store, args.timeout) as projector:
        if args.command == "list":
            _print_snapshot(projector.state.items)
            return 0

        if args.command == "add":
            projector.request_add(args.name)
            return _report(projector, MSG_ADDED)

        record = _find(projector, args.record_id)
        if record is None:
            return _not_found(args.record_id)

        if args.command == "toggle":
            projector.request_toggle(record)
            verb = "Completed" if not record.completed else "Reopened"
            return _report(projector, f"{verb}: {record.name}")

        if args.command == "rename":
            projector.request_edit(record, args.name)
            return _report(projector, f"Unchanged: {record.name}")

        if args.command == "delete":
            projector.request_delete(record)
            return _report(projector, MSG_DELETED)

    raise ValueError(f"Unknown command: {args.command!r}")


def _show_settings(settings: AppSettings) -> None:
    print(f"backend: {settings.backend}")
    print(f"collection: {settings.collection}")
    print(f"project_id: {settings.project_id or '-'}")
    print(f"credentials_path: {settings.credentials_path or '-'}")
    print(f"sqlite_path: {settings.resolved_sqlite_path()}")


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    settings = _resolve_settings(args)

    if args.command == "gui":
        from gui.app import main as gui_main

        return gui_main(settings=settings, log_level=args.log_level)

    if args.command == "config":
        if args.save:
            try:
                save_settings(settings, args.settings)
            except OSError as exc:
                print(f"ERROR: Cannot write settings: {exc}")
                return 2
            print("Settings saved.")
        _show_settings(settings)
        return 0

    try:
        store = open_activity_store(settings)
        return _run_command(args, store)
    except ActivityError as exc:
        print(f"ERROR: {exc}")
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
