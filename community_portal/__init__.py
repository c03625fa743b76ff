# community_portal/__init__.py
# Community Portal: Flask app factory
# - env-first config resolution (FLASK_CONFIG / APP_ENV)
# - request-id aware logging
# - JSON error shape for every /api/ route

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, Union
from uuid import uuid4

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException, InternalServerError, RequestEntityTooLarge
from werkzeug.utils import import_string

# IMPORTANT: never override real env vars in prod
load_dotenv(override=False)

from community_portal.errors import NotFoundError, PortalError, StorageError  # noqa: E402
from community_portal.extensions import db, init_all_extensions  # noqa: E402

ConfigLike = Union[str, Type[Any]]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _env_mode() -> str:
    for key in ("APP_ENV", "ENV", "FLASK_ENV"):
        val = (os.getenv(key) or "").strip().lower()
        if val:
            if val == "prod":
                return "production"
            if val == "dev":
                return "development"
            return val
    return "development"


def _resolve_config(target: Optional[ConfigLike]) -> ConfigLike:
    """
    Choose config class/module path.
    - If explicitly provided, respect it.
    - Else if FLASK_CONFIG is set, use it.
    - Else pick by APP_ENV (production / testing / development).
    """
    if target is not None:
        return target

    explicit = (os.getenv("FLASK_CONFIG") or "").strip()
    if explicit:
        return explicit

    from community_portal.config import CONFIG_BY_NAME

    return CONFIG_BY_NAME.get(_env_mode(), CONFIG_BY_NAME["development"])


def _parse_cors_origins(raw: Any) -> Union[str, list]:
    raw = str(raw or "*").strip()
    if raw in {"", "*"}:
        return "*"
    if "," in raw:
        return [o.strip() for o in raw.split(",") if o.strip()]
    return raw


def _json_error(message: str, status: int, **extra: Any):
    payload: Dict[str, Any] = {"message": str(message)}
    payload.update(extra)
    resp = jsonify(payload)
    resp.status_code = int(status)
    return resp


def _wants_json_response() -> bool:
    path = request.path or ""
    if path.startswith("/api/"):
        return True
    accept = (request.headers.get("Accept") or "").lower()
    return ("application/json" in accept) or bool(request.is_json)


# -----------------------------------------------------------------------------
# Logging with request_id
# -----------------------------------------------------------------------------
class _RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            record.request_id = getattr(g, "request_id", "-")
        except RuntimeError:
            # outside an app/request context
            record.request_id = "-"
        return True


def _configure_logging(app: Flask) -> None:
    fmt = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s]: %(message)s"
    root = logging.getLogger()

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(_RequestIDFilter())
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if not any(isinstance(f, _RequestIDFilter) for f in h.filters):
                h.addFilter(_RequestIDFilter())
            if not getattr(h, "formatter", None) or "%(request_id)s" not in getattr(h.formatter, "_fmt", ""):
                h.setFormatter(logging.Formatter(fmt))

    root.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    logging.getLogger("werkzeug").setLevel(str(app.config.get("WERKZEUG_LOG_LEVEL", "WARNING")).upper())
    app.logger.info("Loaded config: ENV=%s DEBUG=%s", app.config.get("ENV", "?"), app.debug)


# -----------------------------------------------------------------------------
# Integrations
# -----------------------------------------------------------------------------
def _maybe_create_sqlite_tables(app: Flask) -> None:
    uri = (app.config.get("SQLALCHEMY_DATABASE_URI") or "").strip()
    if not uri.startswith("sqlite"):
        return
    if app.config.get("AUTO_CREATE_SQLITE", True) is not True:
        return
    with app.app_context():
        db.create_all()


def _ensure_upload_folder(app: Flask) -> None:
    folder = Path(app.config["UPLOAD_FOLDER"])
    if not folder.is_absolute():
        folder = Path(app.root_path).parent / folder
        app.config["UPLOAD_FOLDER"] = str(folder)
    folder.mkdir(parents=True, exist_ok=True)


def _register_blueprints(app: Flask) -> None:
    from community_portal.routes.api import bp as api_bp
    from community_portal.routes.uploads import bp as uploads_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(uploads_bp)


def _register_cli(app: Flask) -> None:
    from community_portal.cli import portal

    app.cli.add_command(portal)


# -----------------------------------------------------------------------------
# Request lifecycle + errors
# -----------------------------------------------------------------------------
def _register_request_lifecycle(app: Flask) -> None:
    @app.before_request
    def _bootstrap_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g._start_ts = time.perf_counter()

    @app.after_request
    def _attach_request_headers(resp):
        resp.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        start = getattr(g, "_start_ts", None)
        if start:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - start) * 1000))
        return resp


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PortalError)
    def _portal_err(err: PortalError):
        if isinstance(err, NotFoundError):
            app.logger.error("Integrity error: %s", err.message)
        elif isinstance(err, StorageError):
            app.logger.error("Storage error: %s", err.message)
        else:
            app.logger.info("%s: %s", type(err).__name__, err.message)
        return _json_error(err.message, err.status_code, **err.payload)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(err: RequestEntityTooLarge):
        limit = app.config.get("MAX_UPLOAD_FILE_BYTES", 10 * 1024 * 1024) // (1024 * 1024)
        return _json_error(f"Upload too large: each file must be at most {limit} MB", 400)

    @app.errorhandler(HTTPException)
    def _http_err(err: HTTPException):
        if _wants_json_response():
            return _json_error(err.description or err.name, err.code or 500)
        return err

    @app.errorhandler(Exception)
    def _uncaught(err: Exception):
        app.logger.exception("Unhandled error")
        if _wants_json_response():
            return _json_error("Internal Server Error", 500)
        return InternalServerError()


# -----------------------------------------------------------------------------
# Health endpoint
# -----------------------------------------------------------------------------
def _register_health_endpoints(app: Flask) -> None:
    @app.get("/healthz")
    def _healthz():
        return {
            "status": "ok",
            "env": app.config.get("ENV", "unknown"),
            "request_id": getattr(g, "request_id", "-"),
        }


# -----------------------------------------------------------------------------
# Factory
# -----------------------------------------------------------------------------
def create_app(config_class: Optional[ConfigLike] = None, overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__, static_folder=None)

    # ---- Config loading
    cfg = _resolve_config(config_class)
    cfg_obj = import_string(cfg) if isinstance(cfg, str) else cfg
    app.config.from_object(cfg_obj)
    if overrides:
        app.config.update(overrides)

    init_hook = getattr(cfg_obj, "init_app", None)
    if callable(init_hook):
        init_hook(app)

    app.config.setdefault("JSON_SORT_KEYS", False)
    app.url_map.strict_slashes = False

    # ---- Logging
    _configure_logging(app)

    # ---- Extensions
    init_all_extensions(app, cors_origins=_parse_cors_origins(app.config.get("CORS_ORIGINS")))
    _maybe_create_sqlite_tables(app)
    _ensure_upload_folder(app)

    # ---- Request lifecycle / errors
    _register_request_lifecycle(app)
    _register_error_handlers(app)

    # ---- Blueprints + health + CLI
    _register_blueprints(app)
    _register_health_endpoints(app)
    _register_cli(app)

    return app


__all__ = ["create_app"]
