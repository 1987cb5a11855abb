from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RequestType, ResourceKind
from .model import BalanceRequest


class RequestRepository(Protocol):
    """One table per (ResourceKind, RequestType); rows are never updated in place."""

    def create_transfer(self, *, kind: ResourceKind, email: str, name: Optional[str], amount: int) -> int:
        raise NotImplementedError

    def create_incentive(
        self,
        *,
        kind: ResourceKind,
        email: str,
        name: Optional[str],
        amount: int,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def get(self, *, kind: ResourceKind, request_type: RequestType, request_id: int) -> Optional[BalanceRequest]:
        raise NotImplementedError

    def list_pending(
        self,
        *,
        kind: ResourceKind,
        request_type: RequestType,
    ) -> Sequence[BalanceRequest]:
        """Every pending row, oldest first."""

        raise NotImplementedError

    def find_latest(self, *, kind: ResourceKind, request_type: RequestType, email: str) -> Optional[BalanceRequest]:
        raise NotImplementedError

    def delete(self, *, kind: ResourceKind, request_type: RequestType, request_id: int) -> bool:
        """Return False when the row was already gone."""

        raise NotImplementedError

    def count(self, *, kind: ResourceKind, request_type: RequestType) -> int:
        raise NotImplementedError
