from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RequestType, ResourceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BalanceRequest, IncentiveRequest, TransferRequest
from .repository import RequestRepository

TABLES = {
    (ResourceKind.PASS, RequestType.TRANSFER): "pass_transfer_requests",
    (ResourceKind.PASS, RequestType.INCENTIVE): "incentive_pass_requests",
    (ResourceKind.CDNA, RequestType.TRANSFER): "cdna_transfer_requests",
    (ResourceKind.CDNA, RequestType.INCENTIVE): "cdna_incentive_requests",
}


def _columns(request_type: RequestType) -> str:
    if request_type is RequestType.INCENTIVE:
        return "id, email, name, amount, reason, created_at"
    return "id, email, name, amount, created_at"


def _row_to_request(kind: ResourceKind, request_type: RequestType, row: dict) -> BalanceRequest:
    if request_type is RequestType.INCENTIVE:
        return IncentiveRequest(
            request_id=int(row["id"]),
            kind=kind,
            email=row["email"],
            name=row.get("name"),
            amount=int(row["amount"]),
            reason=row.get("reason") or "",
            created_at=row["created_at"],
        )
    return TransferRequest(
        request_id=int(row["id"]),
        kind=kind,
        email=row["email"],
        name=row.get("name"),
        amount=int(row["amount"]),
        created_at=row["created_at"],
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_transfer(self, *, kind: ResourceKind, email: str, name: Optional[str], amount: int) -> int:
        table = TABLES[(kind, RequestType.TRANSFER)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {table}(email, name, amount) VALUES(%s,%s,%s)",
                (email, name, int(amount)),
            )
            return int(cur.lastrowid)

    def create_incentive(
        self,
        *,
        kind: ResourceKind,
        email: str,
        name: Optional[str],
        amount: int,
        reason: str,
    ) -> int:
        table = TABLES[(kind, RequestType.INCENTIVE)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {table}(email, name, amount, reason) VALUES(%s,%s,%s,%s)",
                (email, name, int(amount), reason),
            )
            return int(cur.lastrowid)

    def get(self, *, kind: ResourceKind, request_type: RequestType, request_id: int) -> Optional[BalanceRequest]:
        table = TABLES[(kind, request_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_columns(request_type)} FROM {table} WHERE id=%s", (int(request_id),))
            row = fetchone(cur)
            return _row_to_request(kind, request_type, row) if row else None

    def list_pending(
        self,
        *,
        kind: ResourceKind,
        request_type: RequestType,
    ) -> Sequence[BalanceRequest]:
        table = TABLES[(kind, request_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_columns(request_type)} FROM {table} ORDER BY created_at ASC, id ASC"
            )
            return [_row_to_request(kind, request_type, r) for r in fetchall(cur)]

    def find_latest(self, *, kind: ResourceKind, request_type: RequestType, email: str) -> Optional[BalanceRequest]:
        table = TABLES[(kind, request_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_columns(request_type)} FROM {table}
                WHERE email=%s
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (email,),
            )
            row = fetchone(cur)
            return _row_to_request(kind, request_type, row) if row else None

    def delete(self, *, kind: ResourceKind, request_type: RequestType, request_id: int) -> bool:
        table = TABLES[(kind, request_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {table} WHERE id=%s", (int(request_id),))
            return cur.rowcount > 0

    def count(self, *, kind: ResourceKind, request_type: RequestType) -> int:
        table = TABLES[(kind, request_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM {table}")
            row = fetchone(cur)
            return int(row["n"]) if row else 0
