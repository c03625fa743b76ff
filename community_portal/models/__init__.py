from __future__ import annotations

from typing import Any, Dict

from community_portal.extensions import db

from .contact_message import ContactMessage
from .donation import DONATION_FREQUENCIES, Donation
from .mixins import TimestampMixin, utcnow
from .request_submission import REQUEST_STATUS_PENDING, RequestSubmission
from .user import User

# --- Register models here -------------------------------------------------------
_MODELS = {
    "User": User,
    "RequestSubmission": RequestSubmission,
    "Donation": Donation,
    "ContactMessage": ContactMessage,
}

__all__ = [
    "db",
    "TimestampMixin",
    "utcnow",
    "DONATION_FREQUENCIES",
    "REQUEST_STATUS_PENDING",
    *_MODELS.keys(),
    "available_models",
]


def available_models() -> Dict[str, Any]:
    """Return a dict of {name: model_class}."""
    return dict(_MODELS)
