from __future__ import annotations

import pytest

from src.pass_tracker.pass_tracker.core.enums import ResourceKind
from src.pass_tracker.pass_tracker.core.exceptions import (
    AuthorizationError,
    ConcurrentUpdateError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from src.pass_tracker.pass_tracker.ledger.service import BalanceLedger


@pytest.fixture
def ledger(accounts) -> BalanceLedger:
    return BalanceLedger(accounts)


def test_get_balance_per_kind(ledger, member):
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 5
    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 3


def test_get_balance_unknown_account(ledger):
    with pytest.raises(NotFoundError):
        ledger.get_balance("ghost@example.com", ResourceKind.PASS)


def test_adjust_debit_and_credit(ledger, member):
    assert ledger.adjust(member.email, ResourceKind.PASS, -5) == 0
    assert ledger.adjust(member.email, ResourceKind.CDNA, 10) == 13
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 0


def test_adjust_never_goes_negative(ledger, member):
    with pytest.raises(InsufficientBalanceError) as exc_info:
        ledger.adjust(member.email, ResourceKind.CDNA, -4)

    assert exc_info.value.balance == 3
    assert exc_info.value.amount == 4
    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 3


def test_adjust_rereads_after_concurrent_write(accounts, member):
    accounts.cas_conflicts = 1
    ledger = BalanceLedger(accounts)

    assert ledger.adjust(member.email, ResourceKind.PASS, -2) == 3


def test_adjust_gives_up_when_balance_keeps_changing(accounts, member):
    accounts.cas_conflicts = 10
    ledger = BalanceLedger(accounts, write_attempts=3)

    with pytest.raises(ConcurrentUpdateError):
        ledger.adjust(member.email, ResourceKind.PASS, -1)
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 5


def test_set_balance_override(ledger, admin, member):
    assert ledger.set_balance(actor=admin, email=member.email, kind=ResourceKind.PASS, value="7") == 7
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 7


@pytest.mark.parametrize("value", [-1, "abc", 1.5, None, True])
def test_set_balance_rejects_non_whole_numbers(ledger, admin, member, value):
    with pytest.raises(ValidationError):
        ledger.set_balance(actor=admin, email=member.email, kind=ResourceKind.CDNA, value=value)
    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 3


def test_set_balance_requires_admin(ledger, member):
    with pytest.raises(AuthorizationError):
        ledger.set_balance(actor=member, email=member.email, kind=ResourceKind.PASS, value=99)


def test_set_probation(ledger, accounts, admin, member):
    assert ledger.set_probation(actor=admin, email=member.email, on_probation=True) is True
    assert accounts.get_by_email(member.email).on_probation


def test_set_probation_requires_bool(ledger, admin, member):
    with pytest.raises(ValidationError):
        ledger.set_probation(actor=admin, email=member.email, on_probation="yes")


def test_set_probation_unknown_account(ledger, admin):
    with pytest.raises(NotFoundError):
        ledger.set_probation(actor=admin, email="ghost@example.com", on_probation=False)
