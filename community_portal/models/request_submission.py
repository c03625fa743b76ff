from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from community_portal.extensions import db

from .mixins import TimestampMixin

REQUEST_STATUS_PENDING = "pending"


class RequestSubmission(db.Model, TimestampMixin):
    """A community member's request or complaint. Write-once."""

    __tablename__ = "request_submissions"

    id: Mapped[int] = mapped_column(primary_key=True)
    full_name: Mapped[str] = mapped_column(db.Text, nullable=False)
    email: Mapped[str] = mapped_column(db.Text, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(db.Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(db.Text, nullable=True)
    request_type: Mapped[str] = mapped_column(db.Text, nullable=False)
    subject: Mapped[str] = mapped_column(db.Text, nullable=False)
    description: Mapped[str] = mapped_column(db.Text, nullable=False)
    file_urls: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Public-relative paths (/uploads/<name>) in upload order",
    )
    status: Mapped[str] = mapped_column(
        db.String(20),
        nullable=False,
        default=REQUEST_STATUS_PENDING,
    )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "requestType": self.request_type,
            "subject": self.subject,
            "description": self.description,
            "fileUrls": list(self.file_urls or []),
            "createdAt": self.created_at_iso,
            "status": self.status,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<RequestSubmission {self.id} {self.request_type!r} files={len(self.file_urls or [])}>"
