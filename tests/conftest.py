from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.pass_tracker.pass_tracker.accounts.model import Account
from src.pass_tracker.pass_tracker.core.enums import RequestType, ResourceKind
from src.pass_tracker.pass_tracker.requests.model import IncentiveRequest, TransferRequest

_BALANCE_FIELDS = {
    ResourceKind.PASS: "pass_balance",
    ResourceKind.CDNA: "cdna_balance",
}


class InMemoryAccounts:
    def __init__(self, *accounts: Account):
        self.accounts: dict[str, Account] = {a.email: a for a in accounts}
        self.cas_conflicts = 0

    def add(self, account: Account) -> Account:
        self.accounts[account.email] = account
        return account

    def get_by_email(self, email: str) -> Optional[Account]:
        return self.accounts.get(email)

    def list_all(self):
        return sorted(self.accounts.values(), key=lambda a: a.name)

    def get_balance(self, email: str, kind: ResourceKind) -> Optional[int]:
        account = self.accounts.get(email)
        return account.balance(kind) if account else None

    def set_balance(self, email: str, kind: ResourceKind, value: int) -> bool:
        account = self.accounts.get(email)
        if not account:
            return False
        self.accounts[email] = replace(account, **{_BALANCE_FIELDS[kind]: int(value)})
        return True

    def compare_and_set_balance(self, email: str, kind: ResourceKind, *, expected: int, value: int) -> bool:
        if self.cas_conflicts > 0:
            self.cas_conflicts -= 1
            return False
        account = self.accounts.get(email)
        if not account or account.balance(kind) != expected:
            return False
        return self.set_balance(email, kind, value)

    def set_probation(self, email: str, on_probation: bool) -> bool:
        account = self.accounts.get(email)
        if not account:
            return False
        self.accounts[email] = replace(account, on_probation=on_probation)
        return True

    def set_credential(self, email: str, *, password_hash: str, password_salt: str) -> bool:
        account = self.accounts.get(email)
        if not account:
            return False
        self.accounts[email] = replace(account, password_hash=password_hash, password_salt=password_salt)
        return True

    def clear_credential(self, email: str) -> bool:
        account = self.accounts.get(email)
        if not account:
            return False
        self.accounts[email] = replace(account, password_hash=None, password_salt=None)
        return True


class InMemoryRequests:
    def __init__(self):
        self._next_id = 1
        self._clock = datetime(2026, 2, 1, 10, 0, 0)
        self.rows: dict[tuple[ResourceKind, RequestType], dict[int, object]] = {
            (kind, rtype): {} for kind in ResourceKind for rtype in RequestType
        }
        self.fail_delete = False
        self.delete_calls = 0

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _new_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    def create_transfer(self, *, kind, email, name, amount):
        rid = self._new_id()
        self.rows[(kind, RequestType.TRANSFER)][rid] = TransferRequest(
            request_id=rid,
            kind=kind,
            email=email,
            name=name,
            amount=int(amount),
            created_at=self._tick(),
        )
        return rid

    def create_incentive(self, *, kind, email, name, amount, reason):
        rid = self._new_id()
        self.rows[(kind, RequestType.INCENTIVE)][rid] = IncentiveRequest(
            request_id=rid,
            kind=kind,
            email=email,
            name=name,
            amount=int(amount),
            reason=reason,
            created_at=self._tick(),
        )
        return rid

    def get(self, *, kind, request_type, request_id):
        return self.rows[(kind, request_type)].get(int(request_id))

    def list_pending(self, *, kind, request_type):
        items = sorted(self.rows[(kind, request_type)].values(), key=lambda r: (r.created_at, r.request_id))
        return items

    def find_latest(self, *, kind, request_type, email):
        items = [r for r in self.rows[(kind, request_type)].values() if r.email == email]
        if not items:
            return None
        return max(items, key=lambda r: (r.created_at, r.request_id))

    def delete(self, *, kind, request_type, request_id):
        self.delete_calls += 1
        if self.fail_delete:
            raise RuntimeError("connection lost")
        return self.rows[(kind, request_type)].pop(int(request_id), None) is not None

    def count(self, *, kind, request_type):
        return len(self.rows[(kind, request_type)])


class RecordingSink:
    def __init__(self, *, fail: bool = False):
        self.events = []
        self.fail = fail

    def publish(self, event) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.events.append(event)


def make_account(email: str = "member@example.com", **overrides) -> Account:
    values = dict(
        email=email,
        name="Jordan Member",
        pass_balance=5,
        cdna_balance=3,
        is_admin=False,
        on_probation=False,
    )
    values.update(overrides)
    return Account(**values)


@pytest.fixture
def member() -> Account:
    return make_account()


@pytest.fixture
def admin() -> Account:
    return make_account("admin@example.com", name="Admin, Demo", pass_balance=0, cdna_balance=0, is_admin=True)


@pytest.fixture
def accounts(member, admin) -> InMemoryAccounts:
    return InMemoryAccounts(member, admin)


@pytest.fixture
def requests_repo() -> InMemoryRequests:
    return InMemoryRequests()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def account_factory():
    return make_account


@pytest.fixture
def failing_sink() -> RecordingSink:
    return RecordingSink(fail=True)
