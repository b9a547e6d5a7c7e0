"""Exceptions raised by the report approval and plan aggregation engine."""

from typing import Any


class SalesEngineError(Exception):
    """Base exception for business-rule violations."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(SalesEngineError, ValueError):
    """Malformed amounts, dates or plan settings."""

    pass


class InvalidTransitionError(SalesEngineError):
    """Report status transition not permitted from its current state."""

    def __init__(self, message: str, current_status: Any = None, requested: str | None = None):
        super().__init__(message, details={"current_status": current_status, "requested": requested})
        self.current_status = current_status
        self.requested = requested


class NotFoundError(SalesEngineError, LookupError):
    """Referenced report or plan does not exist."""

    pass


class PermissionDeniedError(SalesEngineError):
    """Actor role is not authorized for the requested operation."""

    pass
