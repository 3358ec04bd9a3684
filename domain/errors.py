"""Error taxonomy shared by the scheduling services and the HTTP layer."""
from __future__ import annotations


class RotationError(Exception):
    status_code = 400


class ValidationError(RotationError):
    """Malformed input rejected before any mutation."""

    status_code = 400


class NotFoundError(RotationError):
    status_code = 404


class ConflictError(RotationError):
    """The requested rotation would overlap an existing one."""

    status_code = 409


class StateError(RotationError):
    """The schedule cannot satisfy the request in its current state."""

    status_code = 422
