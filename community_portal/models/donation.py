from __future__ import annotations

# -----------------------------------------------------------------------------
# Donation Model
# Cents-based amount, donor identity, frequency, and the provider reference
# (Stripe PaymentIntent id or a dev_ mock id) attached once after creation.
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from community_portal.extensions import db

from .mixins import TimestampMixin

DONATION_FREQUENCIES = ("one-time", "monthly", "quarterly", "yearly")


class Donation(db.Model, TimestampMixin):
    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_donations_amount_positive"),
        CheckConstraint(
            "frequency IN ('one-time', 'monthly', 'quarterly', 'yearly')",
            name="ck_donations_frequency",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # ---- Financials (cents) ----
    amount: Mapped[int] = mapped_column(
        db.Integer,
        nullable=False,
        doc="Donation amount in minor units (cents)",
    )

    # ---- Donor ----
    donor_name: Mapped[str] = mapped_column(db.Text, nullable=False)
    donor_email: Mapped[str] = mapped_column(db.Text, nullable=False, index=True)
    anonymous: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)
    frequency: Mapped[str] = mapped_column(db.String(20), nullable=False)

    # ---- Payment tracking ----
    stripe_payment_id: Mapped[Optional[str]] = mapped_column(
        db.String(255),
        nullable=True,
        index=True,
        doc="Stripe PaymentIntent id (pi_...) or development mock id (dev_...)",
    )
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        db.String(255),
        nullable=True,
        unique=True,
        doc="Client-supplied token; one donation per logical submission",
    )

    # ==========================================================
    # Computed Properties
    # ==========================================================
    @property
    def amount_dollars(self) -> float:
        return round((self.amount or 0) / 100.0, 2)

    @property
    def is_development(self) -> bool:
        return bool(self.stripe_payment_id and self.stripe_payment_id.startswith("dev_"))

    # ==========================================================
    # Serialization
    # ==========================================================
    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": int(self.amount or 0),
            "donorName": self.donor_name,
            "donorEmail": self.donor_email,
            "anonymous": bool(self.anonymous),
            "frequency": self.frequency,
            "stripePaymentId": self.stripe_payment_id,
            "createdAt": self.created_at_iso,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Donation {self.id} ${self.amount_dollars:,.2f} {self.frequency}>"
