"""
Domain exceptions raised by repositories and services.

Hierarchy:
    LeakTrackError (base)
    ├── StoreError        relational store failed on a read or a write
    ├── NotFoundError     a lookup join matched no row
    ├── RoleError         the session does not hold / has not selected a role
    └── PhotoUploadError  blob storage could not persist a repair photo

The API layer maps each of these to an ErrorResponse envelope. PhotoUploadError
never reaches a client: the repair service downgrades it to a warning.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class LeakTrackError(Exception):
    """
    Base exception carrying a message and optional structured context.

    Attributes:
        message: Human-readable error message
        context: Extra fields for logs and error envelopes
    """

    error_type = "error"
    status_code = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} | Context: {ctx}"


class StoreError(LeakTrackError):
    """The relational store rejected or failed a statement. Not retried."""

    error_type = "store_error"
    status_code = 503


class NotFoundError(LeakTrackError):
    """
    A referenced row does not exist.

    Context should include the entity name and the lookup key, e.g.
    {"entity": "machine", "chassis_number": "CH-001"}.
    """

    error_type = "not_found"
    status_code = 404


class RoleError(LeakTrackError):
    """The active session role is missing or not allowed for the resource."""

    error_type = "role_error"
    status_code = 403


class PhotoUploadError(LeakTrackError):
    """Repair photo could not be written to storage."""

    error_type = "upload_error"
    status_code = 502
