from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ResourceKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Account:
    """Domain entity: a pre-provisioned member account.

    Note: Plain data object, no DB access. Identity is the normalized email.
    """

    email: str
    name: str
    pass_balance: int
    cdna_balance: int
    is_admin: bool = False
    on_probation: bool = False
    password_hash: Optional[str] = None
    password_salt: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.password_hash is None) != (self.password_salt is None):
            raise ValidationError(f"Account {self.email} has a partial credential (digest and salt must be set together)")

    @property
    def has_credential(self) -> bool:
        return bool(self.password_hash) and bool(self.password_salt)

    def balance(self, kind: ResourceKind) -> int:
        return self.pass_balance if kind is ResourceKind.PASS else self.cdna_balance


def last_name_key(full_name: str) -> str:
    """Sort key for admin listings: "Last, First" or "First Middle Last"."""

    name = (full_name or "").strip().lower()
    if not name:
        return ""
    if "," in name:
        return name.split(",")[0].strip()
    return name.split()[-1]
