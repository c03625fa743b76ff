from .base import SchemaForm, to_camel, to_snake, validate_payload
from .contact_form import ContactForm
from .donation_form import (
    CUSTOM_AMOUNT,
    DEFAULT_PRESET,
    PRESET_AMOUNTS,
    DonationCheckoutForm,
    DonationForm,
    resolve_amount,
)
from .request_form import RequestSubmissionForm
from .user_form import UserForm

__all__ = [
    "SchemaForm",
    "validate_payload",
    "to_camel",
    "to_snake",
    "RequestSubmissionForm",
    "DonationForm",
    "DonationCheckoutForm",
    "ContactForm",
    "UserForm",
    "resolve_amount",
    "PRESET_AMOUNTS",
    "CUSTOM_AMOUNT",
    "DEFAULT_PRESET",
]
