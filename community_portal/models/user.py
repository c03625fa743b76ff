from __future__ import annotations

"""
User model: username + hashed password. No route authenticates against it yet.
"""

from werkzeug.security import check_password_hash, generate_password_hash

from community_portal.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(
        db.String(150),
        unique=True,
        nullable=False,
        index=True,
    )
    password = db.Column(
        db.String(255),
        nullable=False,
        doc="Hashed password (never store plaintext)",
    )

    # ── Auth helpers ────────────────────────────────────────────
    def set_password(self, password: str) -> None:
        """Hash & store the given plaintext password."""
        self.password = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password, password)

    def as_dict(self) -> dict:
        return {"id": self.id, "username": self.username}

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.username}>"
