"""Application error taxonomy.

Every error carries the HTTP status it maps to and optional structured
details that are merged into the JSON error body.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors rendered as ``{"error": ...}`` JSON responses."""

    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:  # noqa: ANN401
        super().__init__(message)
        self.message = message
        self.details = details

    def to_content(self) -> dict[str, Any]:
        """Render the JSON body for this error."""
        return {"error": self.message, **self.details}


class Unauthenticated(AppError):
    """No valid caller identity."""

    status_code = 401


class Forbidden(AppError):
    """Authenticated, but not allowed to touch this user's data."""

    status_code = 403


class ValidationFailed(AppError):
    """Missing or malformed input, rejected before the datastore is touched."""

    status_code = 400


class NotFound(AppError):
    status_code = 404


class StorageFailure(AppError):
    """Underlying datastore error (connectivity, constraint violation)."""

    status_code = 500
