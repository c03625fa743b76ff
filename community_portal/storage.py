# community_portal/storage.py
"""
Persistence gateway.

Every write is its own transaction: one commit per call, rollback on failure,
and SQLAlchemy errors surface as ``StorageError`` (``NotFoundError`` for an
update against a missing row). Nothing here is ever deleted.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from community_portal.errors import NotFoundError, StorageError
from community_portal.extensions import db
from community_portal.models import (
    REQUEST_STATUS_PENDING,
    ContactMessage,
    Donation,
    RequestSubmission,
    User,
)

log = logging.getLogger(__name__)


def _commit(obj: Any, what: str) -> Any:
    db.session.add(obj)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error("%s write failed: %s", what, e, exc_info=True)
        raise StorageError(f"Failed to save {what}") from e
    return obj


def _new_donation(data: Mapping[str, Any], idempotency_key: Optional[str]) -> Donation:
    return Donation(
        amount=int(data["amount"]),
        donor_name=data["donor_name"],
        donor_email=data["donor_email"],
        anonymous=bool(data.get("anonymous", False)),
        frequency=data["frequency"],
        stripe_payment_id=None,
        idempotency_key=idempotency_key or None,
    )


class DatabaseStorage:
    # ----------------------------
    # Users
    # ----------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return db.session.execute(db.select(User).filter_by(username=username)).scalar_one_or_none()

    def create_user(self, data: Mapping[str, Any]) -> User:
        user = User(username=data["username"])
        user.set_password(data["password"])
        return _commit(user, "user")

    # ----------------------------
    # Requests
    # ----------------------------
    def create_request(self, data: Mapping[str, Any]) -> RequestSubmission:
        submission = RequestSubmission(
            full_name=data["full_name"],
            email=data["email"],
            phone=data["phone"],
            address=data.get("address") or None,
            request_type=data["request_type"],
            subject=data["subject"],
            description=data["description"],
            file_urls=list(data.get("file_urls") or []),
            status=REQUEST_STATUS_PENDING,
        )
        return _commit(submission, "request")

    def get_requests(self) -> List[RequestSubmission]:
        stmt = db.select(RequestSubmission).order_by(
            RequestSubmission.created_at.desc(), RequestSubmission.id.desc()
        )
        return list(db.session.execute(stmt).scalars())

    def get_request_by_id(self, request_id: int) -> Optional[RequestSubmission]:
        return db.session.get(RequestSubmission, request_id)

    # ----------------------------
    # Donations
    # ----------------------------
    def create_donation(self, data: Mapping[str, Any], idempotency_key: Optional[str] = None) -> Donation:
        return _commit(_new_donation(data, idempotency_key), "donation")

    def get_or_create_donation(
        self, data: Mapping[str, Any], idempotency_key: str
    ) -> Tuple[Donation, bool]:
        """Donation bound to ``idempotency_key``; creates it on first use. Returns (donation, created)."""
        existing = self.get_donation_by_idempotency_key(idempotency_key)
        if existing is not None:
            return existing, False

        donation = _new_donation(data, idempotency_key)
        db.session.add(donation)
        try:
            db.session.commit()
            return donation, True
        except IntegrityError as e:
            # Concurrent request with the same key won the insert
            db.session.rollback()
            winner = self.get_donation_by_idempotency_key(idempotency_key)
            if winner is None:
                log.error("donation write failed: %s", e, exc_info=True)
                raise StorageError("Failed to save donation") from e
            log.info("Idempotency key race resolved to donation %s", winner.id)
            return winner, False
        except SQLAlchemyError as e:
            db.session.rollback()
            log.error("donation write failed: %s", e, exc_info=True)
            raise StorageError("Failed to save donation") from e

    def update_donation_stripe_id(self, donation_id: int, stripe_payment_id: str) -> Donation:
        donation = db.session.get(Donation, donation_id)
        if donation is None:
            log.error("Integrity error: donation %s not found for payment reference update", donation_id)
            raise NotFoundError(f"Donation {donation_id} not found")
        donation.stripe_payment_id = stripe_payment_id
        return _commit(donation, "donation")

    def get_donations(self) -> List[Donation]:
        stmt = db.select(Donation).order_by(Donation.created_at.desc(), Donation.id.desc())
        return list(db.session.execute(stmt).scalars())

    def get_donation(self, donation_id: int) -> Optional[Donation]:
        return db.session.get(Donation, donation_id)

    def get_donation_by_idempotency_key(self, key: str) -> Optional[Donation]:
        if not key:
            return None
        stmt = db.select(Donation).filter_by(idempotency_key=key)
        return db.session.execute(stmt).scalar_one_or_none()

    # ----------------------------
    # Contact messages
    # ----------------------------
    def create_contact_message(self, data: Mapping[str, Any]) -> ContactMessage:
        msg = ContactMessage(
            full_name=data["full_name"],
            email=data["email"],
            subject=data["subject"],
            message=data["message"],
        )
        return _commit(msg, "contact message")

    def get_contact_messages(self) -> List[ContactMessage]:
        stmt = db.select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        return list(db.session.execute(stmt).scalars())


storage = DatabaseStorage()

__all__ = ["DatabaseStorage", "storage"]
