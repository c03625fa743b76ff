# community_portal/models/mixins.py
"""Shared SQLAlchemy mixins."""

from datetime import datetime, timezone

from community_portal.extensions import db


def utcnow() -> datetime:
    """Naive UTC timestamp (stored without tzinfo, like the rest of the schema)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """Adds a server-assigned created_at column.

    Records in this schema are write-once, so there is no updated_at.
    """

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    @property
    def created_at_iso(self):
        return self.created_at.isoformat() if self.created_at else None
