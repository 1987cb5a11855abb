"""Credential Store: salted PBKDF2 digests per account.

Digest and salt are stored base64-encoded, side by side on the account row.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets

from ..common.validators import require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH, PBKDF2_DIGEST_BYTES, PBKDF2_HASH_NAME, PBKDF2_ITERATIONS, SALT_BYTES
from ..core.exceptions import NotFoundError
from .repository import AccountRepository

logger = logging.getLogger(__name__)


def make_salt() -> bytes:
    return secrets.token_bytes(SALT_BYTES)


def derive(password: str, salt: bytes) -> str:
    raw = hashlib.pbkdf2_hmac(
        PBKDF2_HASH_NAME,
        password.encode("utf-8"),
        salt,
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_DIGEST_BYTES,
    )
    return base64.b64encode(raw).decode("ascii")


def verify(password: str, salt: bytes, expected_digest: str) -> bool:
    return hmac.compare_digest(derive(password, salt), expected_digest or "")


def encode_salt(salt: bytes) -> str:
    return base64.b64encode(salt).decode("ascii")


def decode_salt(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"))


class CredentialStore:
    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts

    def set_credential(self, email: str, password: str) -> None:
        """Store a fresh salt and digest; the caller checks the confirmation."""

        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        salt = make_salt()
        digest = derive(password, salt)
        if not self._accounts.set_credential(email, password_hash=digest, password_salt=encode_salt(salt)):
            raise NotFoundError(f"Account {email} not found")
        logger.info("credential set for %s", email)

    def check(self, password: str, *, password_salt: str, password_hash: str) -> bool:
        try:
            salt = decode_salt(password_salt)
        except (ValueError, UnicodeEncodeError):
            # e.g. corrupted salt values
            logger.warning("unreadable password salt; treating login as failed")
            return False
        return verify(password, salt, password_hash)
