"""
Error taxonomy for the portal API.

Every error carries the HTTP status it maps to and renders as
``{"message": ..., **payload}`` through the handlers registered in the app
factory.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional


class PortalError(Exception):
    status_code = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = dict(payload or {})

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        body.update(self.payload)
        return body


class ValidationError(PortalError):
    """Malformed or missing field(s); ``errors`` maps field name to messages."""

    def __init__(self, errors: Mapping[str, List[str]], message: Optional[str] = None):
        self.errors = {k: list(v) for k, v in errors.items()}
        super().__init__(message or _summarize(self.errors), payload={"errors": self.errors})


class FileConstraintError(PortalError):
    """Upload type / size / count violation. Fails the whole request."""


class ProviderError(PortalError):
    """The payment provider refused or failed; its message is shown to the donor."""

    tag = "payment provider error"

    def __init__(self, message: str, *, donation_id: Optional[int] = None):
        payload: Dict[str, Any] = {"error": self.tag}
        if donation_id is not None:
            payload["donationId"] = donation_id
        super().__init__(message, payload=payload)


class NotFoundError(PortalError):
    """Update against a record id that does not exist (integrity error)."""

    status_code = 404


class StorageError(PortalError):
    """Generic write failure at the storage layer."""

    status_code = 500


def _summarize(errors: Mapping[str, List[str]]) -> str:
    parts = []
    for field, msgs in errors.items():
        if msgs:
            parts.append(f"{field}: {msgs[0]}")
    return "; ".join(parts) or "Invalid request"


__all__ = [
    "PortalError",
    "ValidationError",
    "FileConstraintError",
    "ProviderError",
    "NotFoundError",
    "StorageError",
]
