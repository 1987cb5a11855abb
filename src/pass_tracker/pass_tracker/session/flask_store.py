from __future__ import annotations

from typing import Optional

from flask import session

from ..core.constants import IDENTITY_STORAGE_KEY
from .context import IdentityStore


class FlaskSessionIdentityStore(IdentityStore):
    """Keeps the identity in the signed Flask session cookie.

    ``persistent=True`` makes the cookie outlive the browser session
    (``PERMANENT_SESSION_LIFETIME``), which is the "stay signed in" choice.
    """

    def load(self) -> Optional[str]:
        return session.get(IDENTITY_STORAGE_KEY)

    def save(self, email: str, *, persistent: bool) -> None:
        session.permanent = bool(persistent)
        session[IDENTITY_STORAGE_KEY] = email

    def clear(self) -> None:
        session.pop(IDENTITY_STORAGE_KEY, None)
        session.permanent = False
