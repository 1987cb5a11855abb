from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ResourceKind
from .model import Account


class AccountRepository(Protocol):
    """Repository interface for accounts and their balances.

    Note (DIP): services depend on this interface, never on a concrete DB.
    Each method is one round trip; nothing is locked between calls.
    """

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Account]:
        raise NotImplementedError

    def get_balance(self, email: str, kind: ResourceKind) -> Optional[int]:
        raise NotImplementedError

    def set_balance(self, email: str, kind: ResourceKind, value: int) -> bool:
        raise NotImplementedError

    def compare_and_set_balance(self, email: str, kind: ResourceKind, *, expected: int, value: int) -> bool:
        """Write ``value`` only if the stored balance still equals ``expected``."""

        raise NotImplementedError

    def set_probation(self, email: str, on_probation: bool) -> bool:
        raise NotImplementedError

    def set_credential(self, email: str, *, password_hash: str, password_salt: str) -> bool:
        raise NotImplementedError

    def clear_credential(self, email: str) -> bool:
        raise NotImplementedError
