from typing import Any

import stripe
from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy


# ─────────────────────────────────────────────────────────────
# Core singletons
# ─────────────────────────────────────────────────────────────
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()


# ─────────────────────────────────────────────────────────────
# Stripe
# ─────────────────────────────────────────────────────────────
def _guess_stripe_mode(api_key: str | None) -> str:
    if not api_key:
        return "disabled"
    if api_key.startswith(("sk_live_", "rk_live_")):
        return "live"
    if api_key.startswith(("sk_test_", "rk_test_")):
        return "test"
    return "unknown"


def init_stripe(app: Any) -> None:
    """
    Report the payment provider posture at boot.

    The secret key is read per call by PaymentService, so an app without
    STRIPE_SECRET_KEY runs the whole donation flow in development fallback.
    """
    api_key = (app.config.get("STRIPE_SECRET_KEY") or "").strip()
    app.config["STRIPE_MODE"] = _guess_stripe_mode(api_key)

    if not api_key:
        app.logger.warning(
            "Stripe NOT initialized: missing STRIPE_SECRET_KEY (donations run in development mode)"
        )
        return

    stripe.set_app_info(app.config.get("BRAND_NAME", "Community Portal"))
    app.logger.info("Stripe initialized (%s mode)", app.config["STRIPE_MODE"])


# ─────────────────────────────────────────────────────────────
# Init all extensions
# ─────────────────────────────────────────────────────────────
def init_all_extensions(app: Any, *, cors_origins: Any = "*") -> None:
    db.init_app(app)
    migrate.init_app(app, db, compare_type=True, render_as_batch=True)

    # Browser rule: cannot use credentials with wildcard origin
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        supports_credentials=cors_origins != "*",
        expose_headers=["X-Request-ID"],
        allow_headers=["Content-Type", "Idempotency-Key", "X-Request-ID"],
    )

    init_stripe(app)


__all__ = [
    "db",
    "migrate",
    "cors",
    "init_stripe",
    "init_all_extensions",
]
