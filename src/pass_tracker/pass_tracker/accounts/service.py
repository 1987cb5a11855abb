from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..common.validators import normalize_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .credentials import CredentialStore
from .model import Account, last_name_key
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class LoginStatus(str, Enum):
    OK = "ok"
    NEEDS_SETUP = "needs_setup"


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login attempt that found the account.

    ``NEEDS_SETUP`` is not a failure: the account exists but has never set a
    password, so the caller routes to credential setup.
    """

    status: LoginStatus
    account: Account


def require_admin(actor: Optional[Account]) -> Account:
    if actor is None or not actor.is_admin:
        raise AuthorizationError("Administrator access required")
    return actor


class AuthService:
    """Use case: authenticate accounts and manage their credentials."""

    def __init__(self, accounts: AccountRepository, credentials: CredentialStore):
        self._accounts = accounts
        self._credentials = credentials

    def login(self, email: str, password: str) -> LoginResult:
        normalized = normalize_email(email)
        account = self._accounts.get_by_email(normalized) if normalized else None
        if not account:
            logger.info("login failed: unknown email %s", normalized)
            raise AuthenticationError("Email not found in system")

        if not account.has_credential:
            return LoginResult(status=LoginStatus.NEEDS_SETUP, account=account)

        ok = bool(password) and self._credentials.check(
            password,
            password_salt=account.password_salt or "",
            password_hash=account.password_hash or "",
        )
        if not ok:
            logger.info("login failed: incorrect password for %s", normalized)
            raise AuthenticationError("Incorrect password")

        logger.info("login ok for %s", normalized)
        return LoginResult(status=LoginStatus.OK, account=account)

    def setup_credential(self, email: str, password: str, confirmation: str) -> Account:
        normalized = normalize_email(email)
        account = self._accounts.get_by_email(normalized)
        if not account:
            raise NotFoundError(f"Account {normalized} not found")
        if account.has_credential:
            raise ValidationError("Password already set; ask an administrator to reset it")

        p1 = (password or "").strip()
        p2 = (confirmation or "").strip()
        require_min_length(p1, "Password", MIN_PASSWORD_LENGTH)
        if p1 != p2:
            raise ValidationError("Passwords do not match.")

        self._credentials.set_credential(normalized, p1)
        refreshed = self._accounts.get_by_email(normalized)
        if not refreshed:
            raise NotFoundError(f"Account {normalized} not found")
        return refreshed

    def reset_credential(self, *, actor: Account, email: str) -> None:
        require_admin(actor)
        normalized = normalize_email(email)
        if not self._accounts.clear_credential(normalized):
            raise NotFoundError(f"Account {normalized} not found")
        logger.info("credential reset for %s by %s", normalized, actor.email)


class AccountService:
    """Use case: read accounts (admin listing, own profile)."""

    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts

    def get(self, email: str) -> Account:
        normalized = require_non_empty(normalize_email(email), "Email")
        account = self._accounts.get_by_email(normalized)
        if not account:
            raise NotFoundError(f"Account {normalized} not found")
        return account

    def list_accounts(self, *, actor: Account) -> Sequence[Account]:
        require_admin(actor)
        rows = list(self._accounts.list_all())
        rows.sort(key=lambda a: (last_name_key(a.name), a.name or ""))
        return rows
