from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.orm import Mapped, mapped_column

from community_portal.extensions import db

from .mixins import TimestampMixin


class ContactMessage(db.Model, TimestampMixin):
    __tablename__ = "contact_messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    full_name: Mapped[str] = mapped_column(db.Text, nullable=False)
    email: Mapped[str] = mapped_column(db.Text, nullable=False)
    subject: Mapped[str] = mapped_column(db.Text, nullable=False)
    message: Mapped[str] = mapped_column(db.Text, nullable=False)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "createdAt": self.created_at_iso,
        }
