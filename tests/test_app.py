import pytest

from community_portal import create_app
from community_portal.config import ProductionConfig, TestingConfig


def test_contact_message_created(client):
    resp = client.post(
        "/api/contact",
        json={"fullName": "Sara", "email": "sara@example.com", "subject": "Hello", "message": "Salaam!"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"]
    assert body["data"]["fullName"] == "Sara"
    assert body["data"]["createdAt"]


def test_contact_message_invalid_email(client):
    resp = client.post(
        "/api/contact",
        json={"fullName": "Sara", "email": "sara", "subject": "Hello", "message": "Salaam!"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert "email" in body["errors"]
    assert "email" in body["message"]


def test_contact_without_body(client):
    resp = client.post("/api/contact")
    assert resp.status_code == 400


def test_public_config_dev(client):
    assert client.get("/api/config").get_json() == {
        "publishableKey": "",
        "stripeEnabled": False,
        "currency": "usd",
    }


def test_public_config_with_stripe(stripe_app):
    body = stripe_app.test_client().get("/api/config").get_json()
    assert body["publishableKey"] == "pk_test_123"
    assert body["stripeEnabled"] is True
    assert stripe_app.config["STRIPE_MODE"] == "test"


def test_healthz_and_request_id(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "rid-42"})
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "env": "testing", "request_id": "rid-42"}
    assert resp.headers["X-Request-ID"] == "rid-42"
    assert "X-Response-Time-ms" in resp.headers


def test_generated_request_id(client):
    resp = client.get("/healthz")
    assert len(resp.headers["X-Request-ID"]) == 32


def test_unknown_api_route_is_json_404(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert "message" in resp.get_json()


def test_wrong_method_is_json_405(client):
    resp = client.get("/api/contact")
    assert resp.status_code == 405
    assert "message" in resp.get_json()


def test_unhandled_error_is_json_500(app, monkeypatch):
    from community_portal.storage import storage

    def _boom(data):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(storage, "create_contact_message", _boom)
    resp = app.test_client().post(
        "/api/contact",
        json={"fullName": "Sara", "email": "sara@example.com", "subject": "Hello", "message": "Hi"},
    )
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Internal Server Error"}


def test_config_by_dotted_path(tmp_path):
    app = create_app(
        "community_portal.config.TestingConfig",
        overrides={"SQLALCHEMY_DATABASE_URI": "sqlite://", "UPLOAD_FOLDER": str(tmp_path / "u")},
    )
    assert app.config["TESTING"] is True


def test_config_from_app_env(monkeypatch, tmp_path):
    monkeypatch.delenv("FLASK_CONFIG", raising=False)
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(overrides={"SQLALCHEMY_DATABASE_URI": "sqlite://", "UPLOAD_FOLDER": str(tmp_path / "u")})
    assert app.config["ENV"] == "testing"


def test_production_requires_secret_key(tmp_path):
    with pytest.raises(RuntimeError):
        create_app(
            ProductionConfig,
            overrides={
                "SECRET_KEY": "dev-change-me",
                "SQLALCHEMY_DATABASE_URI": "sqlite://",
                "UPLOAD_FOLDER": str(tmp_path / "u"),
            },
        )


def test_sqlite_engine_options(app):
    assert app.config["SQLALCHEMY_ENGINE_OPTIONS"]["connect_args"]["check_same_thread"] is False


def test_upload_folder_created(app):
    import os

    assert os.path.isdir(app.config["UPLOAD_FOLDER"])


def test_testing_config_has_no_stripe():
    assert TestingConfig.STRIPE_SECRET_KEY == ""
