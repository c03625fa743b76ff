# community_portal/routes/api.py
"""
Portal JSON API (mounted at /api by the app factory).

    POST /api/submit-request         multipart, up to 5 files under "files"
    POST /api/create-payment-intent  JSON donation → clientSecret | development fallback
    POST /api/contact                JSON contact message
    GET  /api/config                 public payment config for the client
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, request

from community_portal.errors import PortalError, ProviderError, StorageError, ValidationError
from community_portal.forms import ContactForm, DonationForm, RequestSubmissionForm, validate_payload
from community_portal.services.payments import DevFallback, Failed, IntentIssued, IntentResult, payment_service
from community_portal.services.uploads import present_files, remove_files, store_files, validate_files
from community_portal.storage import storage

bp = Blueprint("api", __name__)

DEV_MODE_MESSAGE = "Payment processing is not configured. Donation recorded in development mode."


# ----------------------------
# Helpers
# ----------------------------
def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError({"body": ["Expected a JSON object"]})
    return dict(data)


def _idempotency_key(payload: Dict[str, Any]) -> Optional[str]:
    body_key = payload.pop("idempotencyKey", None)
    body_key = payload.pop("idempotency_key", body_key)
    raw = request.headers.get("Idempotency-Key") or body_key
    if raw is None:
        return None
    if not isinstance(raw, str) or len(raw.strip()) > 255:
        raise ValidationError({"idempotencyKey": ["Idempotency key must be a string of at most 255 characters"]})
    return raw.strip() or None


def intent_response(result: IntentResult) -> Dict[str, Any]:
    if isinstance(result, IntentIssued):
        return {"clientSecret": result.client_secret, "donationId": result.donation_id}
    if isinstance(result, DevFallback):
        return {
            "development": True,
            "message": DEV_MODE_MESSAGE,
            "donationId": result.donation_id,
            "mockPaymentId": result.mock_payment_id,
        }
    if isinstance(result, Failed):
        raise ProviderError(result.reason, donation_id=result.donation_id)
    raise TypeError(f"Unhandled payment intent result: {result!r}")


# ----------------------------
# Routes
# ----------------------------
@bp.post("/submit-request")
def submit_request():
    data = validate_payload(RequestSubmissionForm, request.form)

    cfg = current_app.config
    files = present_files(request.files.getlist("files"))
    validate_files(
        files,
        max_files=int(cfg.get("MAX_UPLOAD_FILES", 5)),
        max_bytes=int(cfg.get("MAX_UPLOAD_FILE_BYTES", 10 * 1024 * 1024)),
    )

    upload_dir = cfg["UPLOAD_FOLDER"]
    try:
        urls = store_files(files, upload_dir)
    except OSError as e:
        raise StorageError("Failed to store uploaded files") from e

    try:
        submission = storage.create_request({**data, "file_urls": urls})
    except PortalError:
        remove_files(urls, upload_dir)
        raise

    return {"message": "Request submitted successfully", "data": submission.as_dict()}, 201


@bp.post("/create-payment-intent")
def create_payment_intent():
    payload = _json_body()
    key = _idempotency_key(payload)
    data = validate_payload(DonationForm, payload)

    result = payment_service().create_payment_intent(data, idempotency_key=key)
    return intent_response(result)


@bp.post("/contact")
def contact():
    data = validate_payload(ContactForm, _json_body())
    message = storage.create_contact_message(data)
    return {"message": "Message sent successfully", "data": message.as_dict()}, 201


@bp.get("/config")
def public_config():
    cfg = current_app.config
    return {
        "publishableKey": cfg.get("STRIPE_PUBLISHABLE_KEY") or "",
        "stripeEnabled": bool(cfg.get("STRIPE_SECRET_KEY")),
        "currency": cfg.get("STRIPE_CURRENCY", "usd"),
    }
