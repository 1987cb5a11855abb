from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import RequestType, ResourceKind
from ..requests.repository import RequestRepository
from .emailjs import EmailJSClient

logger = logging.getLogger(__name__)

DIGEST_TITLE = "Weekly Pass Transfer Pending"


def digest_details(count: int) -> str:
    verb = "is" if count == 1 else "are"
    return f"There {verb} {count} pass transfer request(s) awaiting transfer."


class PendingDigest:
    """Periodic reminder of how many Pass transfer requests are still queued."""

    def __init__(self, requests_repo: RequestRepository, client: Optional[EmailJSClient]):
        self._requests = requests_repo
        self._client = client

    def send(self) -> str:
        count = self._requests.count(kind=ResourceKind.PASS, request_type=RequestType.TRANSFER)
        if count <= 0:
            return "no pending"

        if self._client is None:
            logger.warning("%d pass transfer request(s) pending but email delivery is not configured", count)
            return "not configured"

        self._client.send(DIGEST_TITLE, digest_details(count), count=count)
        return "sent"
