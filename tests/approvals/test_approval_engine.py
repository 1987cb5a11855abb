from __future__ import annotations

import pytest

from src.pass_tracker.pass_tracker.approvals.service import ApprovalEngine
from src.pass_tracker.pass_tracker.core.enums import RequestType, ResourceKind
from src.pass_tracker.pass_tracker.core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    NotFoundError,
    PartialFailureError,
)
from src.pass_tracker.pass_tracker.ledger.service import BalanceLedger
from src.pass_tracker.pass_tracker.requests.service import RequestQueue


@pytest.fixture
def queue(requests_repo, accounts) -> RequestQueue:
    return RequestQueue(requests_repo, accounts)


@pytest.fixture
def ledger(accounts) -> BalanceLedger:
    return BalanceLedger(accounts)


@pytest.fixture
def engine(requests_repo, ledger) -> ApprovalEngine:
    return ApprovalEngine(requests_repo, ledger)


def pending(queue, admin, kind, request_type):
    return queue.list_pending(actor=admin, kind=kind, request_type=request_type)


def test_approve_transfer_debits_and_clears(engine, queue, ledger, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=3)

    result = engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert result.new_balance == 2
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 2
    assert pending(queue, admin, ResourceKind.PASS, RequestType.TRANSFER) == []


def test_approve_transfer_fails_when_balance_dropped(engine, queue, ledger, accounts, admin, account_factory):
    cadet = accounts.add(account_factory("cadet@example.com", name="Casey Cadet", pass_balance=2))
    rid = queue.submit_transfer(actor=cadet, kind=ResourceKind.PASS, amount=2)
    ledger.set_balance(actor=admin, email=cadet.email, kind=ResourceKind.PASS, value=1)

    with pytest.raises(InsufficientBalanceError, match="does not have enough passes"):
        engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert ledger.get_balance(cadet.email, ResourceKind.PASS) == 1
    assert [r.request_id for r in pending(queue, admin, ResourceKind.PASS, RequestType.TRANSFER)] == [rid]


def test_approve_same_request_twice(engine, queue, ledger, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.CDNA, amount=1)

    engine.approve_transfer(actor=admin, kind=ResourceKind.CDNA, request_id=rid)
    with pytest.raises(NotFoundError):
        engine.approve_transfer(actor=admin, kind=ResourceKind.CDNA, request_id=rid)

    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 2


def test_approve_incentive_credits_without_cap(engine, queue, ledger, admin, member):
    rid = queue.submit_incentive(actor=member, kind=ResourceKind.PASS, amount=10_000, reason="Exemplary")

    result = engine.approve_incentive(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert result.new_balance == 10_005
    assert pending(queue, admin, ResourceKind.PASS, RequestType.INCENTIVE) == []


def test_approve_incentive_twice_credits_once(engine, queue, ledger, admin, member):
    rid = queue.submit_incentive(actor=member, kind=ResourceKind.CDNA, amount=4, reason="Tutoring")

    engine.approve(actor=admin, kind=ResourceKind.CDNA, request_type=RequestType.INCENTIVE, request_id=rid)
    with pytest.raises(NotFoundError):
        engine.approve(actor=admin, kind=ResourceKind.CDNA, request_type=RequestType.INCENTIVE, request_id=rid)

    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 7


def test_denied_request_cannot_be_approved(engine, queue, ledger, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=1)
    queue.deny(actor=admin, kind=ResourceKind.PASS, request_type=RequestType.TRANSFER, request_id=rid)

    with pytest.raises(NotFoundError):
        engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 5


def test_request_ids_are_scoped_to_their_queue(engine, queue, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=1)

    with pytest.raises(NotFoundError):
        engine.approve_transfer(actor=admin, kind=ResourceKind.CDNA, request_id=rid)


def test_delete_failure_after_debit_is_partial(engine, queue, ledger, requests_repo, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=2)
    requests_repo.fail_delete = True

    with pytest.raises(PartialFailureError, match="updated but request not deleted") as exc_info:
        engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert exc_info.value.new_balance == 3
    assert exc_info.value.request_id == rid
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 3
    requests_repo.fail_delete = False
    assert [r.request_id for r in pending(queue, admin, ResourceKind.PASS, RequestType.TRANSFER)] == [rid]


def test_row_vanishing_before_delete_reverts_credit(engine, queue, ledger, requests_repo, admin, member, monkeypatch):
    rid = queue.submit_incentive(actor=member, kind=ResourceKind.CDNA, amount=1, reason="Band")
    monkeypatch.setattr(requests_repo, "delete", lambda **kwargs: False)

    with pytest.raises(NotFoundError, match="already resolved"):
        engine.approve_incentive(actor=admin, kind=ResourceKind.CDNA, request_id=rid)
    assert ledger.get_balance(member.email, ResourceKind.CDNA) == 3


def test_concurrent_approval_of_same_transfer_debits_once(engine, queue, ledger, requests_repo, admin, member, monkeypatch):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=2)
    other_session = ApprovalEngine(requests_repo, ledger)
    original_get = requests_repo.get

    def get_then_other_session_approves(**kwargs):
        row = original_get(**kwargs)
        monkeypatch.setattr(requests_repo, "get", original_get)
        other_session.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)
        return row

    monkeypatch.setattr(requests_repo, "get", get_then_other_session_approves)

    with pytest.raises(NotFoundError, match="already resolved"):
        engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert ledger.get_balance(member.email, ResourceKind.PASS) == 3
    assert pending(queue, admin, ResourceKind.PASS, RequestType.TRANSFER) == []


def test_failed_revert_warns_of_double_application(engine, queue, ledger, accounts, requests_repo, admin, member, monkeypatch):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=2)

    def row_already_gone(**kwargs):
        accounts.cas_conflicts = 3
        return False

    monkeypatch.setattr(requests_repo, "delete", row_already_gone)

    with pytest.raises(PartialFailureError, match="applied twice") as exc_info:
        engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)

    assert exc_info.value.new_balance == 3
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 3


def test_insufficient_balance_does_not_touch_row(engine, queue, accounts, requests_repo, admin, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.CDNA, amount=3)
    accounts.set_balance(member.email, ResourceKind.CDNA, 0)

    with pytest.raises(InsufficientBalanceError):
        engine.approve_transfer(actor=admin, kind=ResourceKind.CDNA, request_id=rid)
    assert requests_repo.delete_calls == 0


def test_approve_requires_admin(engine, queue, member):
    rid = queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=1)
    with pytest.raises(AuthorizationError):
        engine.approve_transfer(actor=member, kind=ResourceKind.PASS, request_id=rid)


def test_balances_stay_non_negative_through_a_sequence(engine, queue, ledger, accounts, admin, member):
    ids = [queue.submit_transfer(actor=member, kind=ResourceKind.PASS, amount=n) for n in (3, 2, 4)]

    outcomes = []
    for rid in ids:
        try:
            engine.approve_transfer(actor=admin, kind=ResourceKind.PASS, request_id=rid)
            outcomes.append("ok")
        except InsufficientBalanceError:
            outcomes.append("short")
        for account in accounts.accounts.values():
            assert account.pass_balance >= 0
            assert account.cdna_balance >= 0

    assert outcomes == ["ok", "ok", "short"]
    assert ledger.get_balance(member.email, ResourceKind.PASS) == 0
