"""Error taxonomy for scene operations.

Every error carries the HTTP status the request boundary answers with. The
400/403/404 family is detected before any write and its message is safe to show
to clients. The 500 family (ConsistencyError, StorageError) is only discovered
mid-operation; the boundary logs it and replies with a generic message.
"""

from __future__ import annotations


class ConstellationsError(Exception):
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class SchemaError(ConstellationsError):
    """Payload is malformed or violates a value constraint."""

    status_code = 400


class InvalidReferenceError(ConstellationsError):
    """Payload points at an image (or other record) that does not exist."""

    status_code = 400


class ForbiddenError(ConstellationsError):
    status_code = 403


class NotFoundError(ConstellationsError):
    status_code = 404


class NotRepresentableError(NotFoundError):
    """Scene cannot be expressed as a single legacy WWT Place."""


class ConsistencyError(ConstellationsError):
    """A stored foreign key no longer resolves. Never retried."""

    status_code = 500


class StorageError(ConstellationsError):
    status_code = 500
