"""Error taxonomy for one send attempt.

Policy violations are not exceptions: they are ``Block`` verdicts.
"""

from __future__ import annotations


class SendGuardError(Exception):
    """Base class for sendguard errors."""


class PolicyFetchError(SendGuardError):
    """The policy source could not be reached or returned an unusable body."""


class FieldExtractionError(SendGuardError):
    """The host failed to provide a field of the pending message."""

    def __init__(self, field: str, cause: object = None) -> None:
        self.field = field
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to read message field '{field}'{detail}")


class AuditPersistError(SendGuardError):
    """The audit sink rejected the record or could not be reached."""
