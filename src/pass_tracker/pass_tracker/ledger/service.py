from __future__ import annotations

import logging

from ..accounts.model import Account
from ..accounts.repository import AccountRepository
from ..accounts.service import require_admin
from ..common.validators import normalize_email, require_non_negative_int
from ..core.constants import BALANCE_WRITE_ATTEMPTS
from ..core.enums import ResourceKind
from ..core.exceptions import ConcurrentUpdateError, InsufficientBalanceError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class BalanceLedger:
    """Per-account integer balances for each ResourceKind.

    ``adjust`` is the only relative mutation. It writes with a
    compare-and-set against the balance it just read, so a concurrent write
    between the read and the write is detected and the sufficiency check is
    redone on the fresh value. ``set_balance`` is an unconditional
    administrative override (last write wins).
    """

    def __init__(self, accounts: AccountRepository, *, write_attempts: int = BALANCE_WRITE_ATTEMPTS):
        self._accounts = accounts
        self._write_attempts = max(1, int(write_attempts))

    def get_balance(self, email: str, kind: ResourceKind) -> int:
        balance = self._accounts.get_balance(normalize_email(email), kind)
        if balance is None:
            raise NotFoundError(f"Account {normalize_email(email)} not found")
        return balance

    def adjust(self, email: str, kind: ResourceKind, delta: int) -> int:
        email = normalize_email(email)
        delta = int(delta)

        for _ in range(self._write_attempts):
            current = self.get_balance(email, kind)
            if delta == 0:
                return current

            new_balance = current + delta
            if new_balance < 0:
                raise InsufficientBalanceError(
                    f"Insufficient {kind.label}: {email} has {current}, needs {-delta}",
                    email=email,
                    balance=current,
                    amount=-delta,
                )

            if self._accounts.compare_and_set_balance(email, kind, expected=current, value=new_balance):
                logger.info("%s balance for %s: %d -> %d", kind.value, email, current, new_balance)
                return new_balance

            logger.warning("%s balance for %s changed during adjust; re-reading", kind.value, email)

        raise ConcurrentUpdateError(
            f"{kind.label} balance for {email} kept changing; no change was applied"
        )

    def set_balance(self, *, actor: Account, email: str, kind: ResourceKind, value) -> int:
        require_admin(actor)
        email = normalize_email(email)
        label = "Passes" if kind is ResourceKind.PASS else "CDNAs"
        value = require_non_negative_int(value, label)

        if not self._accounts.set_balance(email, kind, value):
            raise NotFoundError(f"Account {email} not found")
        logger.info("%s balance for %s set to %d by %s", kind.value, email, value, actor.email)
        return value

    def set_probation(self, *, actor: Account, email: str, on_probation) -> bool:
        require_admin(actor)
        if not isinstance(on_probation, bool):
            raise ValidationError("Probation must be true or false")
        email = normalize_email(email)

        if not self._accounts.set_probation(email, on_probation):
            raise NotFoundError(f"Account {email} not found")
        logger.info("probation for %s set to %s by %s", email, on_probation, actor.email)
        return on_probation
