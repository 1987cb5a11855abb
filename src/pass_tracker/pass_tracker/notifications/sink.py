from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..common.datetime_utils import to_iso
from .emailjs import EmailJSClient

logger = logging.getLogger(__name__)

EVENT_TITLES = {
    "cdna_transfer": "New CDNA Use Request",
    "cdna_incentive": "New CDNA Incentive Request",
    "pass_incentive": "New Incentive Pass Request",
}


@dataclass(frozen=True)
class NotificationEvent:
    """Emitted once per newly created request that administrators should hear about."""

    request_kind: str
    email: str
    name: Optional[str]
    amount: int
    created_at: datetime
    reason: Optional[str] = None

    @property
    def title(self) -> str:
        return EVENT_TITLES.get(self.request_kind, f"New {self.request_kind.replace('_', ' ')} request")

    def detail_lines(self) -> list[str]:
        lines = [
            f"Name: {self.name}" if self.name else None,
            f"Email: {self.email}" if self.email else None,
            f"Amount: {self.amount}",
            f"Reason: {self.reason}" if self.reason else None,
            f"Created: {to_iso(self.created_at)}",
        ]
        return [line for line in lines if line]


class NotificationSink(Protocol):
    def publish(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class NullNotificationSink(NotificationSink):
    """Used when email delivery is not configured."""

    def publish(self, event: NotificationEvent) -> None:
        logger.debug("notification not delivered (no sink configured): %s for %s", event.request_kind, event.email)


class EmailNotificationSink(NotificationSink):
    def __init__(self, client: EmailJSClient):
        self._client = client

    def publish(self, event: NotificationEvent) -> None:
        self._client.send(event.title, "\n".join(event.detail_lines()))


class BackgroundNotificationSink(NotificationSink):
    """Hands each event to a daemon thread so publish returns immediately.

    Delivery errors are logged on the worker thread and never reach the
    caller.
    """

    def __init__(self, inner: NotificationSink):
        self._inner = inner
        self._lock = threading.Lock()
        self._threads: set[threading.Thread] = set()

    def publish(self, event: NotificationEvent) -> None:
        thread = threading.Thread(
            target=self._deliver,
            args=(event,),
            name=f"notify-{event.request_kind}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _deliver(self, event: NotificationEvent) -> None:
        try:
            self._inner.publish(event)
        except Exception:
            logger.warning("background notification for %s from %s failed", event.request_kind, event.email, exc_info=True)
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the deliveries started so far have finished."""

        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)
