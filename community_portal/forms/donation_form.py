"""
Donation schemas.

``DonationForm`` is the insert shape the API accepts (amount already in cents).
``DonationCheckoutForm`` is the client-side shape: the donor picks a preset or
types a custom dollar amount, and the cents amount is derived before submit.
"""

from __future__ import annotations

from typing import Any, Optional as Opt

from wtforms import RadioField, SelectField
from wtforms.validators import DataRequired, Email, NumberRange, Optional

from community_portal.errors import ValidationError
from community_portal.models.donation import DONATION_FREQUENCIES

from .base import FlagField, SchemaForm, TextField, WholeNumberField, strip_text

PRESET_AMOUNTS = ("25", "50", "100")
CUSTOM_AMOUNT = "custom"
DEFAULT_PRESET = "100"

CUSTOM_AMOUNT_MESSAGE = "Please enter a valid custom amount"


def _whole_dollars(value: Any) -> Opt[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    s = str(value).strip()
    if not s.isdigit():
        return None
    return int(s)


def resolve_amount(predefined_amount: Any, custom_amount: Any = None) -> int:
    """Cents amount for a preset ("25"/"50"/"100") or a custom whole-dollar amount."""
    choice = str(predefined_amount if predefined_amount is not None else "").strip()

    if choice == CUSTOM_AMOUNT:
        dollars = _whole_dollars(custom_amount)
        if dollars is None or dollars < 1:
            raise ValidationError({"customAmount": [CUSTOM_AMOUNT_MESSAGE]})
        return dollars * 100

    if choice in PRESET_AMOUNTS:
        return int(choice) * 100

    raise ValidationError({"predefinedAmount": ["Not a valid choice."]})


class DonationForm(SchemaForm):
    amount = WholeNumberField(
        "Amount (cents)",
        validators=[NumberRange(min=1, message="Amount must be a positive whole number of cents")],
    )
    donor_name = TextField(
        "Name",
        filters=[strip_text],
        validators=[DataRequired(message="Name is required")],
    )
    donor_email = TextField(
        "Email",
        filters=[strip_text],
        validators=[DataRequired(message="Email is required"), Email(message="Invalid email address")],
    )
    anonymous = FlagField("Donate anonymously", default=False)
    frequency = SelectField(
        "Frequency",
        choices=[(f, f) for f in DONATION_FREQUENCIES],
        validators=[DataRequired(message="Frequency is required")],
    )


class DonationCheckoutForm(DonationForm):
    amount = None

    predefined_amount = RadioField(
        "Amount",
        choices=[(a, f"${a}") for a in PRESET_AMOUNTS] + [(CUSTOM_AMOUNT, "Custom")],
        default=DEFAULT_PRESET,
    )
    custom_amount = WholeNumberField(
        "Custom amount (USD)",
        validators=[Optional(), NumberRange(min=1, message=CUSTOM_AMOUNT_MESSAGE)],
    )

    def validate(self, extra_validators=None):
        ok = super().validate(extra_validators=extra_validators)
        if self.predefined_amount.data == CUSTOM_AMOUNT and not self.custom_amount.errors:
            if self.custom_amount.data is None:
                self.custom_amount.errors = [CUSTOM_AMOUNT_MESSAGE]
                self._errors = None
                ok = False
        return ok

    @property
    def amount_cents(self) -> int:
        return resolve_amount(self.predefined_amount.data, self.custom_amount.data)

    def cleaned(self):
        data = super().cleaned()
        data["amount"] = self.amount_cents
        return data

    def donation_payload(self) -> dict:
        """Insert-shaped camelCase body for /api/create-payment-intent."""
        return {
            "amount": self.amount_cents,
            "donorName": self.donor_name.data,
            "donorEmail": self.donor_email.data,
            "anonymous": bool(self.anonymous.data),
            "frequency": self.frequency.data,
        }
