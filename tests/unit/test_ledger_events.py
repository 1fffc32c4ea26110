from __future__ import annotations

import logging

import pytest

from token_ledger import ZERO_ADDRESS, Approval, Ledger, NullEventSink, Transfer


def test_only_committed_events_reach_the_sink(ledger, sink, user, other):
    ledger.mint(user, 10)
    ledger.transfer(user, other, 11)  # reverts
    ledger.transfer(user, other, 4)
    assert sink.events() == [Transfer(ZERO_ADDRESS, user, 10), Transfer(user, other, 4)]


def test_records_are_indexed_per_committed_operation(ledger, sink, owner, spender, other):
    ledger.mint(owner, 10)
    ledger.burn(owner, 99)  # reverts, does not consume an index
    ledger.approve(owner, spender, 5)
    ledger.transfer_from(spender, owner, other, 2)
    recs = sink.get_logs()
    assert [(r.op_index, r.log_index, r.operation, r.name) for r in recs] == [
        (0, 0, "mint", "Transfer"),
        (1, 0, "approve", "Approval"),
        (2, 0, "transfer_from", "Approval"),
        (2, 1, "transfer_from", "Transfer"),
    ]


def test_get_logs_filters(ledger, sink, owner, user, other):
    ledger.mint(owner, 10)
    ledger.mint(user, 10)
    ledger.transfer(user, other, 1)
    assert len(sink.get_logs(address=other)) == 1
    assert len(sink.get_logs(address=user)) == 2
    assert len(sink.get_logs(name="Approval")) == 0
    assert len(sink.get_logs(limit=2)) == 2


def test_subscribers_receive_committed_records(ledger, owner, spender):
    seen = []
    unsubscribe = ledger.subscribe(seen.append)
    ledger.approve(owner, spender, 3)
    ledger.approve(ZERO_ADDRESS, spender, 3)  # reverts
    unsubscribe()
    ledger.approve(owner, spender, 4)
    assert [r.event for r in seen] == [Approval(owner, spender, 3)]


def test_failing_subscriber_does_not_undo_operation(ledger, user, caplog):
    def boom(_rec):
        raise RuntimeError("observer broke")

    ledger.subscribe(boom)
    with caplog.at_level(logging.ERROR, logger="token_ledger"):
        rc = ledger.mint(user, 1)
    assert rc.is_success
    assert ledger.balance_of(user) == 1
    assert any("subscriber failed" in r.getMessage() for r in caplog.records)


def test_null_sink_discards(user):
    led = Ledger(sink=NullEventSink())
    assert led.mint(user, 1).is_success
    assert list(led.sink.get_logs()) == []


def test_revert_is_logged_with_error_code(ledger, user, caplog):
    with caplog.at_level(logging.INFO, logger="token_ledger"):
        ledger.burn(user, 1)
    rec = next(r for r in caplog.records if "reverted" in r.getMessage())
    assert rec.code == "ERC20InsufficientBalance"
    assert rec.operation == "burn"


def test_exception_inside_operation_rolls_back(ledger, user, monkeypatch):
    ledger.mint(user, 5)
    before = ledger.snapshot()

    def explode(*_a, **_k):
        raise RuntimeError("boom")

    monkeypatch.setattr(ledger, "_update", explode)
    with pytest.raises(RuntimeError):
        ledger.burn(user, 1)
    assert ledger.snapshot() == before
    assert ledger._journal.depth() == 0


def test_operation_started_by_subscriber_is_recorded_after(ledger, sink, owner, spender, other):
    ledger.mint(owner, 10)
    ledger.approve(owner, spender, 5)
    fired = []

    def on_record(rec):
        if rec.operation == "transfer_from" and not fired:
            fired.append(ledger.transfer(owner, other, 1))

    ledger.subscribe(on_record)
    assert ledger.transfer_from(spender, owner, other, 2).is_success
    assert fired and fired[0].is_success

    keys = [(r.op_index, r.log_index) for r in sink.get_logs()]
    assert keys == [(0, 0), (1, 0), (2, 0), (2, 1), (3, 0)]
    assert keys == sorted(keys)
    assert ledger.balance_of(other) == 3


def test_subscribers_see_whole_operation_in_order(ledger, owner, spender, other):
    ledger.mint(owner, 10)
    ledger.approve(owner, spender, 5)
    seen = []
    ledger.subscribe(lambda rec: seen.append((rec.op_index, rec.log_index, rec.name)))
    ledger.transfer_from(spender, owner, other, 2)
    assert seen == [(2, 0, "Approval"), (2, 1, "Transfer")]
