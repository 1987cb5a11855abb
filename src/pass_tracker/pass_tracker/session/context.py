from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..accounts.model import Account
from ..accounts.repository import AccountRepository
from ..common.validators import normalize_email

logger = logging.getLogger(__name__)


class IdentityStore(Protocol):
    """Opaque key-value storage for the signed-in email."""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, email: str, *, persistent: bool) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class SessionContext:
    """Which account is signed in, with an explicit lifecycle.

    Set at login, cleared at sign-out, optionally rehydrated from the store
    at startup. The account itself is always re-read from the repository so
    balances shown to the caller come from the ledger, not from a copy.
    """

    def __init__(self, accounts: AccountRepository, store: IdentityStore):
        self._accounts = accounts
        self._store = store
        self._email: Optional[str] = None

    def sign_in(self, account: Account, *, remember: bool) -> None:
        self._email = account.email
        self._store.save(account.email, persistent=remember)

    def remember_identity(self, email: str) -> None:
        self._store.save(normalize_email(email), persistent=True)

    def forget(self) -> None:
        self._store.clear()

    def current_account(self) -> Optional[Account]:
        email = self._email or self._store.load()
        if not email:
            return None

        account = self._accounts.get_by_email(normalize_email(email))
        if not account:
            logger.info("remembered identity %s no longer exists; forgetting it", email)
            self._email = None
            self.forget()
            return None

        self._email = account.email
        return account

    def restore(self) -> Optional[Account]:
        self._email = None
        return self.current_account()

    def sign_out(self) -> None:
        self._email = None
        self.forget()
