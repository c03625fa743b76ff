from types import SimpleNamespace

import pytest
import stripe

from community_portal import create_app
from community_portal.config import TestingConfig


def _make_app(tmp_path, **overrides):
    cfg = {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'portal.db'}",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    }
    cfg.update(overrides)
    return create_app(TestingConfig, overrides=cfg)


@pytest.fixture()
def app(tmp_path):
    return _make_app(tmp_path)


@pytest.fixture()
def stripe_app(tmp_path):
    return _make_app(tmp_path, STRIPE_SECRET_KEY="sk_test_123", STRIPE_PUBLISHABLE_KEY="pk_test_123")


@pytest.fixture()
def make_app(tmp_path):
    def _factory(**overrides):
        return _make_app(tmp_path, **overrides)

    return _factory


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def fake_stripe(monkeypatch):
    """Records PaymentIntent calls; set ``.fail`` to an exception to make create() raise it."""
    state = SimpleNamespace(created=[], retrieved=[], fail=None)

    def _create(**kwargs):
        state.created.append(kwargs)
        if state.fail is not None:
            raise state.fail
        n = len(state.created)
        return SimpleNamespace(id=f"pi_{n}", client_secret=f"pi_{n}_secret_abc")

    def _retrieve(intent_id, **kwargs):
        state.retrieved.append(intent_id)
        return SimpleNamespace(id=intent_id, client_secret=f"{intent_id}_secret_abc")

    monkeypatch.setattr(stripe.PaymentIntent, "create", _create)
    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", _retrieve)
    return state


@pytest.fixture()
def donation_payload():
    return {
        "amount": 5000,
        "donorName": "Ahmed Khan",
        "donorEmail": "ahmed@example.com",
        "anonymous": False,
        "frequency": "one-time",
    }
