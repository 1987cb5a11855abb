from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..accounts.model import Account
from ..accounts.repository import AccountRepository
from ..accounts.service import require_admin
from ..common.datetime_utils import now_utc
from ..common.validators import normalize_email, require_positive_int
from ..core.enums import RequestType, ResourceKind
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.sink import NotificationEvent, NotificationSink, NullNotificationSink
from .model import BalanceRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)

# New rows in these queues are announced to administrators.
NOTIFIED_QUEUES = frozenset(
    {
        (ResourceKind.CDNA, RequestType.TRANSFER),
        (ResourceKind.PASS, RequestType.INCENTIVE),
        (ResourceKind.CDNA, RequestType.INCENTIVE),
    }
)


class RequestQueue:
    """Use case: submit, list and deny balance requests.

    Submissions are validated against the account as it is stored now, not
    against the copy the caller holds.
    """

    def __init__(
        self,
        requests: RequestRepository,
        accounts: AccountRepository,
        notifier: Optional[NotificationSink] = None,
    ):
        self._requests = requests
        self._accounts = accounts
        self._notifier = notifier or NullNotificationSink()

    def _load_member(self, actor: Account) -> Account:
        account = self._accounts.get_by_email(normalize_email(actor.email))
        if not account:
            raise NotFoundError(f"Account {actor.email} not found")
        return account

    def submit_transfer(self, *, actor: Account, kind: ResourceKind, amount) -> int:
        account = self._load_member(actor)

        if kind is ResourceKind.PASS and account.on_probation:
            raise ValidationError("Pass transfers are not available while on probation")

        amount = require_positive_int(amount, "Amount")
        balance = account.balance(kind)
        if amount > balance:
            raise ValidationError(f"Amount exceeds balance: requested {amount} {kind.label}, have {balance}")

        request_id = self._requests.create_transfer(
            kind=kind,
            email=account.email,
            name=account.name,
            amount=amount,
        )
        logger.info("%s transfer request %d submitted by %s for %d", kind.value, request_id, account.email, amount)
        self._announce(kind, RequestType.TRANSFER, account, amount)
        return request_id

    def submit_incentive(self, *, actor: Account, kind: ResourceKind, amount, reason: str) -> int:
        account = self._load_member(actor)

        amount = require_positive_int(amount, "Amount")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Reason is required for an incentive request")

        request_id = self._requests.create_incentive(
            kind=kind,
            email=account.email,
            name=account.name,
            amount=amount,
            reason=reason,
        )
        logger.info("%s incentive request %d submitted by %s for %d", kind.value, request_id, account.email, amount)
        self._announce(kind, RequestType.INCENTIVE, account, amount, reason=reason)
        return request_id

    def list_pending(
        self,
        *,
        actor: Account,
        kind: ResourceKind,
        request_type: RequestType,
    ) -> Sequence[BalanceRequest]:
        require_admin(actor)
        return self._requests.list_pending(kind=kind, request_type=request_type)

    def find_latest_by_account(
        self,
        *,
        email: str,
        kind: ResourceKind,
        request_type: RequestType,
    ) -> Optional[BalanceRequest]:
        return self._requests.find_latest(kind=kind, request_type=request_type, email=normalize_email(email))

    def deny(self, *, actor: Account, kind: ResourceKind, request_type: RequestType, request_id: int) -> None:
        require_admin(actor)
        if not self._requests.delete(kind=kind, request_type=request_type, request_id=int(request_id)):
            raise NotFoundError(f"{kind.value} {request_type.value} request {request_id} no longer exists")
        logger.info("%s %s request %d denied by %s", kind.value, request_type.value, int(request_id), actor.email)

    def _announce(
        self,
        kind: ResourceKind,
        request_type: RequestType,
        account: Account,
        amount: int,
        *,
        reason: Optional[str] = None,
    ) -> None:
        if (kind, request_type) not in NOTIFIED_QUEUES:
            return
        event = NotificationEvent(
            request_kind=f"{kind.value}_{request_type.value}",
            email=account.email,
            name=account.name,
            amount=amount,
            reason=reason,
            created_at=now_utc(),
        )
        try:
            self._notifier.publish(event)
        except Exception:
            # Delivery never affects the request that was already created.
            logger.warning("notification for %s from %s failed", event.request_kind, account.email, exc_info=True)
