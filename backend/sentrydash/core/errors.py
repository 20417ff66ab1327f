"""Error taxonomy shared by the occupancy core and the HTTP layer.

Every error carries a stable ``kind`` string and the HTTP status the API
maps it to, so handlers never have to inspect messages.
"""

from __future__ import annotations

from typing import Any


class SentryDashError(Exception):
    """Base class for errors surfaced to API clients."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


class ValidationError(SentryDashError):
    """Malformed or missing input."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(SentryDashError):
    """Unknown room or profile."""

    kind = "not_found"
    status_code = 404


class ConflictError(SentryDashError):
    """Concurrent updates could not be reconciled; the request may be retried."""

    kind = "conflict"
    status_code = 409


class StaleVersionError(ConflictError):
    """A conditional write found a different version than the one read."""

    def __init__(self, room_id: str, expected_version: int, actual_version: int | None = None) -> None:
        super().__init__(
            f"Room {room_id} was modified concurrently",
            room_id=room_id,
            expected_version=expected_version,
            actual_version=actual_version,
        )
        self.room_id = room_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class DependencyError(SentryDashError):
    """A backing store is unavailable or did not answer in time."""

    kind = "dependency_unavailable"
    status_code = 503
