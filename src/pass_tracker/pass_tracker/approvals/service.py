from __future__ import annotations

import logging
from dataclasses import dataclass

from ..accounts.model import Account
from ..accounts.service import require_admin
from ..core.enums import RequestType, ResourceKind
from ..core.exceptions import InsufficientBalanceError, NotFoundError, PartialFailureError
from ..ledger.service import BalanceLedger
from ..requests.model import BalanceRequest
from ..requests.repository import RequestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalResult:
    request: BalanceRequest
    new_balance: int


class ApprovalEngine:
    """Resolves pending requests: adjust the balance, then delete the row.

    Order is read request -> read balance -> write balance -> delete row, and
    each step aborts the rest on failure. The request is re-read before any
    balance math, so approving an id that another session already resolved
    fails with NotFoundError and changes nothing.

    Two administrators can both read the same row before either deletes it.
    The delete decides the winner: the session whose delete finds the row
    already gone reverts its own balance change and fails with NotFoundError,
    so the request is applied once. If that revert cannot be written, the
    PartialFailureError says the change may have been applied twice.
    """

    def __init__(self, requests: RequestRepository, ledger: BalanceLedger):
        self._requests = requests
        self._ledger = ledger

    def approve_transfer(self, *, actor: Account, kind: ResourceKind, request_id: int) -> ApprovalResult:
        require_admin(actor)
        req = self._load(kind, RequestType.TRANSFER, request_id)

        current = self._ledger.get_balance(req.email, kind)
        if current < req.amount:
            raise InsufficientBalanceError(
                f"Cannot approve: {req.email} does not have enough {kind.label} ({current} < {req.amount})",
                email=req.email,
                balance=current,
                amount=req.amount,
            )

        new_balance = self._ledger.adjust(req.email, kind, -req.amount)
        self._remove(req, new_balance)
        logger.info(
            "%s transfer %d approved by %s: %s debited %d (now %d)",
            kind.value, req.request_id, actor.email, req.email, req.amount, new_balance,
        )
        return ApprovalResult(request=req, new_balance=new_balance)

    def approve_incentive(self, *, actor: Account, kind: ResourceKind, request_id: int) -> ApprovalResult:
        require_admin(actor)
        req = self._load(kind, RequestType.INCENTIVE, request_id)

        new_balance = self._ledger.adjust(req.email, kind, req.amount)
        self._remove(req, new_balance)
        logger.info(
            "%s incentive %d approved by %s: %s credited %d (now %d)",
            kind.value, req.request_id, actor.email, req.email, req.amount, new_balance,
        )
        return ApprovalResult(request=req, new_balance=new_balance)

    def approve(self, *, actor: Account, kind: ResourceKind, request_type: RequestType, request_id: int) -> ApprovalResult:
        if request_type is RequestType.TRANSFER:
            return self.approve_transfer(actor=actor, kind=kind, request_id=request_id)
        return self.approve_incentive(actor=actor, kind=kind, request_id=request_id)

    def _load(self, kind: ResourceKind, request_type: RequestType, request_id: int) -> BalanceRequest:
        req = self._requests.get(kind=kind, request_type=request_type, request_id=int(request_id))
        if not req:
            raise NotFoundError(f"{kind.value} {request_type.value} request {request_id} no longer exists")
        return req

    def _remove(self, req: BalanceRequest, new_balance: int) -> None:
        label = req.kind.label[:1].upper() + req.kind.label[1:]
        try:
            deleted = self._requests.delete(kind=req.kind, request_type=req.request_type, request_id=req.request_id)
        except Exception as exc:
            logger.error(
                "%s balance for %s updated to %d but request %d not removed",
                req.kind.value, req.email, new_balance, req.request_id, exc_info=True,
            )
            raise PartialFailureError(
                f"{label} updated but request not deleted: {exc}. Balance for {req.email} is now {new_balance}; do not approve again.",
                request_id=req.request_id,
                email=req.email,
                new_balance=new_balance,
            ) from exc

        if not deleted:
            self._revert(req, new_balance, label)

    def _revert(self, req: BalanceRequest, new_balance: int, label: str) -> None:
        """Undo this session's balance change for a row another session already resolved."""

        delta = req.amount if req.request_type is RequestType.TRANSFER else -req.amount
        try:
            restored = self._ledger.adjust(req.email, req.kind, delta)
        except Exception as exc:
            logger.error(
                "%s request %d was resolved elsewhere and reverting %s balance for %s failed",
                req.kind.value, req.request_id, req.kind.value, req.email, exc_info=True,
            )
            raise PartialFailureError(
                f"{label} updated but request {req.request_id} was already resolved by another session, "
                f"and the change could not be reverted: {exc}. The {req.kind.label} for {req.email} may have been "
                f"applied twice (balance now {new_balance}); correct it manually.",
                request_id=req.request_id,
                email=req.email,
                new_balance=new_balance,
            ) from exc

        logger.warning(
            "%s request %d was resolved elsewhere; reverted %s balance for %s to %d",
            req.kind.value, req.request_id, req.kind.value, req.email, restored,
        )
        raise NotFoundError(
            f"{req.kind.value} {req.request_type.value} request {req.request_id} was already resolved by another session; "
            f"no change was applied"
        )
