import re

import pytest
import stripe

from community_portal.extensions import db
from community_portal.models import Donation
from community_portal.routes.api import intent_response
from community_portal.services.payments import DevFallback, IntentIssued, PaymentService

DEV_REF = re.compile(r"^dev_\d+_\d{1,3}$")


def _donations(app):
    with app.app_context():
        return db.session.query(Donation).order_by(Donation.id).all()


# ----------------------------
# Development fallback
# ----------------------------
def test_dev_fallback_records_donation_with_mock_reference(app, client, donation_payload):
    resp = client.post("/api/create-payment-intent", json=donation_payload)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["development"] is True
    assert body["message"]
    assert "clientSecret" not in body
    assert DEV_REF.match(body["mockPaymentId"])

    [donation] = _donations(app)
    assert donation.id == body["donationId"]
    assert donation.amount == 5000
    assert donation.amount_dollars == 50.0
    assert donation.stripe_payment_id == body["mockPaymentId"]
    assert donation.is_development


def test_invalid_donation_is_rejected_without_a_row(app, client, donation_payload):
    donation_payload["amount"] = 12.5
    resp = client.post("/api/create-payment-intent", json=donation_payload)
    assert resp.status_code == 400
    body = resp.get_json()
    assert "amount" in body["errors"]
    assert body["message"]
    assert _donations(app) == []


def test_non_object_body_is_rejected(client):
    resp = client.post("/api/create-payment-intent", json=[1, 2, 3])
    assert resp.status_code == 400
    assert "body" in resp.get_json()["errors"]


# ----------------------------
# Stripe configured
# ----------------------------
def test_provider_success_returns_client_secret(stripe_app, fake_stripe, donation_payload):
    client = stripe_app.test_client()
    resp = client.post("/api/create-payment-intent", json=donation_payload)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body == {"clientSecret": "pi_1_secret_abc", "donationId": body["donationId"]}

    [call] = fake_stripe.created
    assert call["amount"] == 5000
    assert call["currency"] == "usd"
    assert call["metadata"] == {"donationId": str(body["donationId"])}
    assert call["idempotency_key"] == f"donation-{body['donationId']}"
    assert call["api_key"] == "sk_test_123"

    [donation] = _donations(stripe_app)
    assert donation.stripe_payment_id == "pi_1"


def test_provider_failure_keeps_donation_without_reference(stripe_app, fake_stripe, donation_payload):
    fake_stripe.fail = stripe.StripeError("Your card was declined.")
    client = stripe_app.test_client()
    resp = client.post("/api/create-payment-intent", json=donation_payload)
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Your card was declined."
    assert body["error"] == "payment provider error"

    [donation] = _donations(stripe_app)
    assert donation.stripe_payment_id is None


def test_donation_written_before_provider_call(stripe_app, monkeypatch, donation_payload):
    seen = []

    def _create(**kwargs):
        seen.append(db.session.query(Donation).count())
        raise stripe.StripeError("down")

    monkeypatch.setattr(stripe.PaymentIntent, "create", _create)
    stripe_app.test_client().post("/api/create-payment-intent", json=donation_payload)
    assert seen == [1]


# ----------------------------
# Idempotency
# ----------------------------
def test_dev_replay_returns_same_donation(app, client, donation_payload):
    headers = {"Idempotency-Key": "abc-123"}
    first = client.post("/api/create-payment-intent", json=donation_payload, headers=headers).get_json()
    second = client.post("/api/create-payment-intent", json=donation_payload, headers=headers).get_json()
    assert first["donationId"] == second["donationId"]
    assert first["mockPaymentId"] == second["mockPaymentId"]
    assert len(_donations(app)) == 1


def test_body_idempotency_key_is_accepted(app, client, donation_payload):
    payload = dict(donation_payload, idempotencyKey="body-key")
    client.post("/api/create-payment-intent", json=payload)
    client.post("/api/create-payment-intent", json=payload)
    [donation] = _donations(app)
    assert donation.idempotency_key == "body-key"


def test_reused_key_with_different_donation_is_rejected(app, client, donation_payload):
    headers = {"Idempotency-Key": "abc-123"}
    client.post("/api/create-payment-intent", json=donation_payload, headers=headers)
    changed = dict(donation_payload, amount=9900)
    resp = client.post("/api/create-payment-intent", json=changed, headers=headers)
    assert resp.status_code == 400
    assert "idempotencyKey" in resp.get_json()["errors"]
    assert len(_donations(app)) == 1


def test_provider_replay_retries_after_failure_then_reissues(stripe_app, fake_stripe, donation_payload):
    client = stripe_app.test_client()
    headers = {"Idempotency-Key": "retry-me"}

    fake_stripe.fail = stripe.StripeError("Temporary failure")
    assert client.post("/api/create-payment-intent", json=donation_payload, headers=headers).status_code == 400

    fake_stripe.fail = None
    second = client.post("/api/create-payment-intent", json=donation_payload, headers=headers).get_json()
    assert second["clientSecret"] == "pi_2_secret_abc"

    third = client.post("/api/create-payment-intent", json=donation_payload, headers=headers).get_json()
    assert third == second
    assert fake_stripe.retrieved == ["pi_2"]
    assert len(fake_stripe.created) == 2

    [donation] = _donations(stripe_app)
    assert donation.stripe_payment_id == "pi_2"


# ----------------------------
# Results
# ----------------------------
def test_client_secret_is_hidden_from_repr():
    result = IntentIssued(donation_id=7, client_secret="pi_7_secret_xyz")
    assert "secret_xyz" not in repr(result)


def test_intent_response_rejects_unknown_variant():
    with pytest.raises(TypeError):
        intent_response(object())


def test_intent_response_dev_shape():
    body = intent_response(DevFallback(donation_id=3, mock_payment_id="dev_1_2"))
    assert body["development"] is True
    assert body["donationId"] == 3
    assert body["mockPaymentId"] == "dev_1_2"


def test_service_from_config():
    svc = PaymentService.from_config({"STRIPE_SECRET_KEY": " ", "STRIPE_CURRENCY": "EUR"})
    assert svc.enabled is False
    assert svc.currency == "eur"


def test_preset_fifty_dollar_donation_in_development(app, client):
    from community_portal.forms import DonationCheckoutForm

    form = DonationCheckoutForm.from_payload(
        {
            "predefinedAmount": "50",
            "donorName": "Ahmed",
            "donorEmail": "a@x.com",
            "anonymous": False,
            "frequency": "one-time",
        }
    )
    assert form.validate()

    body = client.post("/api/create-payment-intent", json=form.donation_payload()).get_json()
    assert body["development"] is True
    assert isinstance(body["donationId"], int)
    assert body["mockPaymentId"].startswith("dev_")

    [donation] = _donations(app)
    assert donation.amount == 5000
    assert donation.donor_name == "Ahmed"
    assert donation.anonymous is False
