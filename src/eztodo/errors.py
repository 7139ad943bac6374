from __future__ import annotations

from typing import Any, Dict, List, Optional


class StoreError(Exception):
    """Base class for every error raised by the data layer."""


# PUBLIC_INTERFACE
class ValidationError(StoreError):
    """
    Raised when caller input has the wrong shape (e.g. an empty title).
    No state has been changed when this is raised.

    `errors` follows the pydantic error-detail layout so that the HTTP layer
    can return it unchanged.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or [{"loc": [], "msg": message, "type": "value_error"}]


# PUBLIC_INTERFACE
class NotFound(StoreError):
    """Raised when a referenced record id does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


# PUBLIC_INTERFACE
class PersistenceError(StoreError):
    """Raised when a collection could not be written to disk. The in-memory change was rolled back."""

    def __init__(self, path: Any, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"failed to persist {path}: {cause}")
        self.path = path
        self.cause = cause


class CorruptData(StoreError):
    """Raised while decoding a stored collection; codec.load recovers from it."""


class ScheduleError(StoreError):
    """Raised for a recurrence rule that can never produce an occurrence."""
