# community_portal/client/api.py
"""Thin HTTP client for the portal API (requests.Session, no retries)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import requests

log = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    status_code: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def message(self) -> str:
        return str(self.data.get("message") or f"Request failed ({self.status_code})")


class PortalClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _wrap(resp: requests.Response) -> ApiResponse:
        try:
            data = resp.json()
        except ValueError:
            data = {"message": resp.text or resp.reason or ""}
        if not isinstance(data, dict):
            data = {"data": data}
        return ApiResponse(status_code=resp.status_code, data=data)

    # ----------------------------
    # Endpoints
    # ----------------------------
    def get_config(self) -> ApiResponse:
        return self._wrap(self.session.get(self._url("/api/config")))

    def create_payment_intent(self, donation: Dict[str, Any], idempotency_key: Optional[str] = None) -> ApiResponse:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        log.debug("create-payment-intent amount=%s", donation.get("amount"))
        return self._wrap(self.session.post(self._url("/api/create-payment-intent"), json=donation, headers=headers))

    def submit_request(
        self,
        fields: Dict[str, Any],
        files: Iterable[Tuple[str, Any, str]] = (),
    ) -> ApiResponse:
        """``files`` is an iterable of (filename, fileobj, mimetype)."""
        multipart = [("files", f) for f in files]
        data = {k: v for k, v in fields.items() if v is not None}
        return self._wrap(self.session.post(self._url("/api/submit-request"), data=data, files=multipart or None))

    def send_contact(self, message: Dict[str, Any]) -> ApiResponse:
        return self._wrap(self.session.post(self._url("/api/contact"), json=message))
