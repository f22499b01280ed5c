"""
Error taxonomy for the working-time scheduling engine.

Pure computations degrade on bad data values instead of raising; these
exceptions are reserved for structurally invalid requests and for the
lifecycle layer that talks to the stores.
"""

from typing import Optional


class WorktimeError(Exception):
    """Base class for all scheduling engine errors."""

    pass


class ScheduleValidationError(WorktimeError):
    """Raised when a request is invalid before any write is attempted."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotFoundError(WorktimeError):
    """Raised when a schedule day, event, holiday or user does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type} '{entity_id}' not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class PermissionDeniedError(WorktimeError):
    """Raised when the acting user may not touch the target resource."""

    pass


class PersistenceError(WorktimeError):
    """
    Raised when the store fails or a transaction rolls back. The operation
    must be treated as not applied.
    """

    pass
