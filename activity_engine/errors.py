"""
Domain exceptions for the activity list.

Notes
-----
Engine code does not raise generic exceptions for expected failure modes.
Backend client errors are wrapped at the store boundary so callers only ever
see the types below.
"""

from __future__ import annotations


class ActivityError(RuntimeError):
    """Base exception for all activity list failures."""


class ValidationError(ActivityError):
    """Raised when a record fails validation before any write is attempted."""


class PersistenceError(ActivityError):
    """Raised when the backing store rejects or fails an operation."""


class SubscriptionError(PersistenceError):
    """Raised (or reported) when a live snapshot feed fails."""


class BackendConfigurationError(ActivityError):
    """Raised when settings cannot produce a usable store."""
