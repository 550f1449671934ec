"""
Error types raised by the portal services.

Each error carries a message key from the catalogue in ``core.messages`` plus
optional format parameters; the API layer turns them into localised JSON
responses with the matching HTTP status.
"""
from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message_key: str, detail: Optional[str] = None, **params: Any):
        self.message_key = message_key
        self.detail = detail
        self.params: Dict[str, Any] = params
        super().__init__(detail or message_key)


class ValidationFailed(PortalError):
    """Input rejected before anything is written."""
    status_code = 400


class ClaimRejected(ValidationFailed):
    """A claim submission precondition failed; nothing was written."""


class DuplicatePhone(ValidationFailed):
    status_code = 409

    def __init__(self):
        super().__init__("phone_taken")


class PermissionDenied(PortalError):
    status_code = 403


class NotFound(PortalError):
    status_code = 404


class VersionConflict(PortalError):
    """The record changed since the caller read it."""
    status_code = 409

    def __init__(self, current_version: Optional[int] = None):
        self.current_version = current_version
        super().__init__("record_conflict")


class IdentityError(PortalError):
    """The staff identity service refused or failed a request."""
    status_code = 502

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__("identity_error", detail=detail)
        self.params["detail"] = detail
        if status_code is not None:
            self.status_code = status_code


class StorageError(Exception):
    """Raised by the object store when an upload cannot be written."""


class AuthenticationFailed(PortalError):
    """Phone/PIN login refused; the cause is not disclosed."""
    status_code = 401

    def __init__(self):
        super().__init__("invalid_credentials")


class TooManyAttempts(PortalError):
    """Too many failed logins for one phone number inside the window."""
    status_code = 429

    def __init__(self):
        super().__init__("too_many_attempts")
