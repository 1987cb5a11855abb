from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ResourceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account
from .repository import AccountRepository

_BALANCE_COLUMNS = {
    ResourceKind.PASS: "pass_balance",
    ResourceKind.CDNA: "cdna_balance",
}

_SELECT_ACCOUNT = """
    SELECT email, name, pass_balance, cdna_balance, is_admin, on_probation, password_hash, password_salt
    FROM accounts
"""


def _row_to_account(row: dict) -> Account:
    return Account(
        email=row["email"],
        name=row.get("name") or "",
        pass_balance=int(row.get("pass_balance") or 0),
        cdna_balance=int(row.get("cdna_balance") or 0),
        is_admin=bool(row.get("is_admin")),
        on_probation=bool(row.get("on_probation")),
        password_hash=row.get("password_hash"),
        password_salt=row.get("password_salt"),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_ACCOUNT + " WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def list_all(self) -> Sequence[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_ACCOUNT + " ORDER BY name ASC")
            return [_row_to_account(r) for r in fetchall(cur)]

    def get_balance(self, email: str, kind: ResourceKind) -> Optional[int]:
        column = _BALANCE_COLUMNS[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {column} AS balance FROM accounts WHERE email=%s", (email,))
            row = fetchone(cur)
            return int(row["balance"]) if row else None

    def set_balance(self, email: str, kind: ResourceKind, value: int) -> bool:
        column = _BALANCE_COLUMNS[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE accounts SET {column}=%s WHERE email=%s", (int(value), email))
            # rowcount is 0 when the value is unchanged, so match on existence instead.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM accounts WHERE email=%s", (email,))
            return fetchone(cur) is not None

    def compare_and_set_balance(self, email: str, kind: ResourceKind, *, expected: int, value: int) -> bool:
        column = _BALANCE_COLUMNS[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE accounts SET {column}=%s WHERE email=%s AND {column}=%s",
                (int(value), email, int(expected)),
            )
            return cur.rowcount > 0

    def set_probation(self, email: str, on_probation: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE accounts SET on_probation=%s WHERE email=%s", (int(bool(on_probation)), email))
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM accounts WHERE email=%s", (email,))
            return fetchone(cur) is not None

    def set_credential(self, email: str, *, password_hash: str, password_salt: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE accounts SET password_hash=%s, password_salt=%s WHERE email=%s",
                (password_hash, password_salt, email),
            )
            return cur.rowcount > 0

    def clear_credential(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE accounts SET password_hash=NULL, password_salt=NULL WHERE email=%s", (email,))
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM accounts WHERE email=%s", (email,))
            return fetchone(cur) is not None
