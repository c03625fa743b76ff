# community_portal/client/donation_flow.py
"""
Client-side donation workflow.

    SELECTING_AMOUNT ──submit──▶ SUBMITTING ──▶ AWAITING_PAYMENT_WIDGET ──confirm──▶ SUCCESS
                                     │                    ▲          └──────────▶ PAYMENT_FAILED
                                     └──▶ DEV_SUCCESS     └────────retry─────────────────┘

The payment widget is represented by a ``confirm(client_secret)`` callable that
returns None on success or the provider's error message. User-facing feedback
is collected as dismissable ``Notice`` objects.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

import requests

from community_portal.forms import DonationCheckoutForm, resolve_amount

from .api import PortalClient

log = logging.getLogger(__name__)

__all__ = ["FlowState", "Notice", "FlowError", "DonationFlow", "resolve_amount"]


class FlowState(str, enum.Enum):
    SELECTING_AMOUNT = "selecting_amount"
    SUBMITTING = "submitting"
    AWAITING_PAYMENT_WIDGET = "awaiting_payment_widget"
    DEV_SUCCESS = "dev_success"
    SUCCESS = "success"
    PAYMENT_FAILED = "payment_failed"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = "default"  # "default" | "destructive"


class FlowError(RuntimeError):
    """Operation not allowed in the current state."""


class DonationFlow:
    def __init__(
        self,
        client: PortalClient,
        publishable_key: Optional[str] = None,
        token_factory: Callable[[], str] = lambda: uuid4().hex,
    ):
        self.client = client
        self.publishable_key = publishable_key or None
        self._new_token = token_factory

        self.state = FlowState.SELECTING_AMOUNT
        self.values: Dict[str, Any] = {}
        self.notices: List[Notice] = []
        self.amount: Optional[int] = None
        self.donation_id: Optional[int] = None
        self.mock_payment_id: Optional[str] = None
        self.idempotency_key: Optional[str] = None
        self._keyed_for: Optional[Tuple[int, str, str]] = None
        self._client_secret: Optional[str] = None

    # ----------------------------
    # Notices
    # ----------------------------
    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self.notices.append(Notice(title, description, variant))

    def dismiss(self, notice: Notice) -> None:
        if notice in self.notices:
            self.notices.remove(notice)

    # ----------------------------
    # Helpers
    # ----------------------------
    def _require(self, *states: FlowState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.name for s in states)
            raise FlowError(f"Cannot do that while {self.state.name} (expected {allowed})")

    def _drop_token(self) -> None:
        self.idempotency_key = None
        self._keyed_for = None

    def _back_to_selection(self) -> FlowState:
        self.state = FlowState.SELECTING_AMOUNT
        self._client_secret = None
        return self.state

    @property
    def has_client_secret(self) -> bool:
        return self._client_secret is not None

    @property
    def amount_dollars(self) -> Optional[float]:
        return None if self.amount is None else self.amount / 100.0

    def load_config(self) -> None:
        """Pick up the publishable key from /api/config when none was given."""
        resp = self.client.get_config()
        if resp.ok:
            self.publishable_key = resp.data.get("publishableKey") or self.publishable_key

    # ----------------------------
    # Transitions
    # ----------------------------
    def submit(self, values: Mapping[str, Any]) -> FlowState:
        self._require(FlowState.SELECTING_AMOUNT)
        self.values = dict(values)

        form = DonationCheckoutForm.from_payload(self.values)
        if not form.validate():
            for messages in form.wire_errors().values():
                for msg in messages:
                    self._notify("Validation Error", msg, "destructive")
            return self.state

        payload = form.donation_payload()
        self.amount = payload["amount"]
        # a token is bound to the donation it was first sent with
        fingerprint = (payload["amount"], payload["donorEmail"].lower(), payload["frequency"])
        if self.idempotency_key is None or self._keyed_for != fingerprint:
            self.idempotency_key = self._new_token()
            self._keyed_for = fingerprint

        self.state = FlowState.SUBMITTING
        try:
            resp = self.client.create_payment_intent(payload, idempotency_key=self.idempotency_key)
        except requests.RequestException as e:
            log.warning("create-payment-intent request failed: %s", e)
            self._notify(
                "Failed to create donation",
                "An error occurred while processing your donation. Please try again.",
                "destructive",
            )
            return self._back_to_selection()

        if not resp.ok:
            if "idempotencyKey" in (resp.data.get("errors") or {}):
                self._drop_token()
            self._notify("Failed to create donation", resp.message, "destructive")
            return self._back_to_selection()

        data = resp.data
        self.donation_id = data.get("donationId")

        if data.get("development"):
            self.mock_payment_id = data.get("mockPaymentId")
            self._drop_token()
            self.state = FlowState.DEV_SUCCESS
            self._notify(
                "Development Mode",
                "Donation recorded successfully in development mode (no payment processing)",
            )
            return self.state

        if data.get("clientSecret"):
            if not self.publishable_key:
                self._notify(
                    "Error",
                    "Payment processing is unavailable: no publishable key is configured.",
                    "destructive",
                )
                return self._back_to_selection()
            self._client_secret = data["clientSecret"]
            self.state = FlowState.AWAITING_PAYMENT_WIDGET
            return self.state

        self._notify(
            "Error",
            "An unexpected error occurred. The server did not return the expected data.",
            "destructive",
        )
        return self._back_to_selection()

    def confirm_payment(self, confirm: Callable[[str], Optional[str]]) -> FlowState:
        self._require(FlowState.AWAITING_PAYMENT_WIDGET)
        if self._client_secret is None:
            raise FlowError("No client secret for the payment step")

        error = confirm(self._client_secret)
        if error:
            self.state = FlowState.PAYMENT_FAILED
            self._notify("Payment Failed", str(error), "destructive")
            return self.state

        self.state = FlowState.SUCCESS
        self._notify("Payment Successful", "Thank you for your generous donation!")
        self.values = {}
        self._drop_token()
        self._client_secret = None
        return self.state

    def retry(self) -> FlowState:
        self._require(FlowState.PAYMENT_FAILED)
        self.state = FlowState.AWAITING_PAYMENT_WIDGET
        return self.state

    def cancel(self) -> FlowState:
        """Abandon the payment step. The recorded donation stays as is on the server."""
        self._require(FlowState.AWAITING_PAYMENT_WIDGET, FlowState.PAYMENT_FAILED)
        self._drop_token()
        self.donation_id = None
        return self._back_to_selection()

    def reset(self) -> FlowState:
        self.values = {}
        self.amount = None
        self.donation_id = None
        self.mock_payment_id = None
        self._drop_token()
        return self._back_to_selection()
