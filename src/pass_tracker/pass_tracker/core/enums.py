from __future__ import annotations

from enum import Enum


class ResourceKind(str, Enum):
    """The two independently tracked balances a member holds."""

    PASS = "pass"
    CDNA = "cdna"

    @property
    def label(self) -> str:
        return "passes" if self is ResourceKind.PASS else "CDNAs"


class RequestType(str, Enum):
    """Transfer requests debit a balance, incentive requests credit it."""

    TRANSFER = "transfer"
    INCENTIVE = "incentive"
