from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import requests

logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"


class EmailDeliveryError(Exception):
    """Raised when EmailJS rejects or cannot receive a send call."""


def parse_recipients(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class EmailJSClient:
    """Sends templated emails through the EmailJS REST endpoint."""

    def __init__(
        self,
        *,
        service_id: str,
        template_id: str,
        public_key: str,
        to_emails: Sequence[str],
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        if not service_id or not template_id or not public_key:
            raise ValueError("EmailJS service id, template id and public key are required")
        if not to_emails:
            raise ValueError("At least one notification recipient is required")
        self._service_id = service_id
        self._template_id = template_id
        self._public_key = public_key
        self._to_emails = list(to_emails)
        self._timeout = timeout
        self._session = session or requests.Session()

    def send(self, event_title: str, details: str, **extra_params: Any) -> None:
        payload = {
            "service_id": self._service_id,
            "template_id": self._template_id,
            "user_id": self._public_key,
            "template_params": {
                "to_email": ",".join(self._to_emails),
                "event_title": event_title,
                "details": details,
                **extra_params,
            },
        }
        try:
            response = self._session.post(EMAILJS_SEND_URL, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise EmailDeliveryError(f"EmailJS unreachable: {exc}") from exc

        if not response.ok:
            raise EmailDeliveryError(f"EmailJS error: {response.status_code} {response.text}")
        logger.info("email sent via EmailJS: %s", event_title)
