# community_portal/services/payments.py
"""
Donation → PaymentIntent orchestration.

The donation row is always written first. Then either:
  - Stripe is configured: create a PaymentIntent and attach its id, or
  - it is not: attach a ``dev_<ms>_<n>`` mock reference (development fallback).

A Stripe failure leaves the donation with no payment reference; the caller
gets a ``Failed`` result carrying the provider's message.

With an idempotency key, a repeated submission reuses the original donation
and replays its outcome instead of writing a new row.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import stripe
from flask import current_app

from community_portal.errors import ValidationError
from community_portal.models import Donation
from community_portal.storage import storage

log = logging.getLogger(__name__)

DEV_REF_PREFIX = "dev_"


# ----------------------------
# Results
# ----------------------------
@dataclass(frozen=True)
class IntentIssued:
    donation_id: int
    client_secret: str = field(repr=False)


@dataclass(frozen=True)
class DevFallback:
    donation_id: int
    mock_payment_id: str


@dataclass(frozen=True)
class Failed:
    donation_id: int
    reason: str


IntentResult = Union[IntentIssued, DevFallback, Failed]


def mock_payment_id() -> str:
    return f"{DEV_REF_PREFIX}{int(time.time() * 1000)}_{random.randint(0, 999)}"


def _provider_message(err: stripe.StripeError) -> str:
    return getattr(err, "user_message", None) or str(err) or "Payment provider error"


class PaymentService:
    def __init__(self, secret_key: Optional[str] = None, currency: str = "usd"):
        self.secret_key = (secret_key or "").strip()
        self.currency = (currency or "usd").lower()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PaymentService":
        return cls(
            secret_key=config.get("STRIPE_SECRET_KEY"),
            currency=config.get("STRIPE_CURRENCY") or "usd",
        )

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    # ----------------------------
    # Public API
    # ----------------------------
    def create_payment_intent(
        self, donation_data: Mapping[str, Any], idempotency_key: Optional[str] = None
    ) -> IntentResult:
        """
        ``donation_data`` is the cleaned DonationForm dict (snake_case keys).
        Raises ValidationError when the key was already used for a different donation.
        """
        if idempotency_key:
            donation, created = storage.get_or_create_donation(donation_data, idempotency_key)
            if not created:
                _ensure_same_donation(donation, donation_data)
                log.info("Replaying donation %s for idempotency key", donation.id)
                return self._replay(donation)
        else:
            donation = storage.create_donation(donation_data)

        return self._issue(donation)

    # ----------------------------
    # Internals
    # ----------------------------
    def _issue(self, donation: Donation) -> IntentResult:
        if not self.enabled:
            ref = mock_payment_id()
            storage.update_donation_stripe_id(donation.id, ref)
            log.info("Development payment for donation %s: %s", donation.id, ref)
            return DevFallback(donation_id=donation.id, mock_payment_id=ref)

        try:
            intent = stripe.PaymentIntent.create(
                amount=int(donation.amount),
                currency=self.currency,
                metadata={"donationId": str(donation.id)},
                idempotency_key=f"donation-{donation.id}",
                api_key=self.secret_key,
            )
        except stripe.StripeError as e:
            reason = _provider_message(e)
            log.warning("Stripe error creating intent for donation %s: %s", donation.id, reason)
            return Failed(donation_id=donation.id, reason=reason)

        storage.update_donation_stripe_id(donation.id, intent.id)
        log.info("PaymentIntent %s created for donation %s", intent.id, donation.id)
        return IntentIssued(donation_id=donation.id, client_secret=intent.client_secret)

    def _replay(self, donation: Donation) -> IntentResult:
        ref = donation.stripe_payment_id
        if not ref:
            # Earlier provider call failed (or is still in flight): try again for the same row
            return self._issue(donation)

        if ref.startswith(DEV_REF_PREFIX):
            return DevFallback(donation_id=donation.id, mock_payment_id=ref)

        if not self.enabled:
            return Failed(donation_id=donation.id, reason="Payment provider is not configured")

        try:
            intent = stripe.PaymentIntent.retrieve(ref, api_key=self.secret_key)
        except stripe.StripeError as e:
            reason = _provider_message(e)
            log.warning("Stripe error retrieving intent %s: %s", ref, reason)
            return Failed(donation_id=donation.id, reason=reason)

        return IntentIssued(donation_id=donation.id, client_secret=intent.client_secret)


def _ensure_same_donation(donation: Donation, data: Mapping[str, Any]) -> None:
    same = (
        int(donation.amount) == int(data["amount"])
        and (donation.donor_email or "").lower() == str(data["donor_email"]).lower()
        and donation.frequency == data["frequency"]
    )
    if not same:
        raise ValidationError(
            {"idempotencyKey": ["Idempotency key was already used for a different donation"]}
        )


def payment_service() -> PaymentService:
    """Service bound to the current app's config."""
    return PaymentService.from_config(current_app.config)


__all__ = [
    "IntentIssued",
    "DevFallback",
    "Failed",
    "IntentResult",
    "PaymentService",
    "payment_service",
    "mock_payment_id",
]
