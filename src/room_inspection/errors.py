"""Exception hierarchy for the inspection core.

Every failure in this package is recoverable: callers catch the subclass they
care about and return control to the user with the prior state intact.
"""

from __future__ import annotations

from enum import Enum


class ValidationReason(str, Enum):
    EMPTY_TITLE = "empty_title"
    MISSING_ROOM = "missing_room"
    MISSING_INSPECTOR = "missing_inspector"
    UNKNOWN_ROOM = "unknown_room"
    WRONG_PASSPHRASE = "wrong_passphrase"
    EMPTY_NOTE = "empty_note"
    EMPTY_STAFF_NAME = "empty_staff_name"


class InspectionError(Exception):
    """Base class for all errors raised by room_inspection."""


class ValidationError(InspectionError):
    """Locally recoverable input problem; never sent to the store."""

    def __init__(self, reason: ValidationReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class SyncError(InspectionError):
    """A store operation did not complete. The local session is untouched."""


class SyncUnavailableError(SyncError):
    """Store unreachable, timed out, or no identity session established."""


class SyncRejectedError(SyncError):
    """Store declined the write (permissions, missing document)."""


class PartialDeleteError(SyncError):
    """A bulk delete stopped partway; ``deleted`` documents are already gone."""

    def __init__(self, deleted: int, total: int, message: str) -> None:
        self.deleted = deleted
        self.total = total
        super().__init__(message)


class RefinementError(InspectionError):
    """Text oracle unavailable or returned something unusable."""


class AuthError(InspectionError):
    """Identity gate could not establish a session."""


class PhotoNotReadyError(InspectionError):
    """Native photo dimensions are not known yet."""
