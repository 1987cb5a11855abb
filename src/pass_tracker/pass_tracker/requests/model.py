from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..core.enums import RequestType, ResourceKind


@dataclass(frozen=True)
class TransferRequest:
    """A pending debit. Created on submission, destroyed on approval or denial."""

    request_id: int
    kind: ResourceKind
    email: str
    name: Optional[str]
    amount: int
    created_at: datetime

    @property
    def request_type(self) -> RequestType:
        return RequestType.TRANSFER


@dataclass(frozen=True)
class IncentiveRequest:
    """A pending credit with its justification."""

    request_id: int
    kind: ResourceKind
    email: str
    name: Optional[str]
    amount: int
    reason: str
    created_at: datetime

    @property
    def request_type(self) -> RequestType:
        return RequestType.INCENTIVE


BalanceRequest = Union[TransferRequest, IncentiveRequest]
