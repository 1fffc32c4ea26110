from __future__ import annotations

from token_ledger import (UNLIMITED, U256_MAX, ZERO_ADDRESS, Approval, InsufficientAllowance,
                          InsufficientBalance, InvalidApprover, InvalidReceiver, InvalidSender,
                          InvalidSpender, Transfer)
from tests import INITIAL_SUPPLY


# --- approve ------------------------------------------------------------------


def test_approve_sets_allowance_and_emits(ledger, owner, spender):
    rc = ledger.approve(owner, spender, 50)
    assert rc.is_success
    assert ledger.allowance(owner, spender) == 50
    assert rc.events == (Approval(owner, spender, 50),)


def test_approve_overwrites(ledger, owner, spender):
    ledger.approve(owner, spender, 50)
    ledger.approve(owner, spender, 7)
    assert ledger.allowance(owner, spender) == 7


def test_approve_is_directional(ledger, owner, spender):
    ledger.approve(owner, spender, 50)
    assert ledger.allowance(spender, owner) == 0


def test_approve_does_not_require_balance(ledger, owner, spender):
    assert ledger.approve(owner, spender, U256_MAX).is_success
    assert ledger.total_supply() == 0


def test_approve_zero_owner_reverts(ledger, spender):
    assert ledger.approve(ZERO_ADDRESS, spender, 1).error == InvalidApprover(ZERO_ADDRESS)


def test_approve_zero_spender_reverts(ledger, owner):
    assert ledger.approve(owner, ZERO_ADDRESS, 1).error == InvalidSpender(ZERO_ADDRESS)


# --- transfer_from ------------------------------------------------------------


def test_transfer_from_spends_allowance(funded, owner, spender, other):
    funded.approve(owner, spender, 60)
    rc = funded.transfer_from(spender, owner, other, 25)
    assert rc.is_success
    assert funded.balance_of(owner) == INITIAL_SUPPLY - 25
    assert funded.balance_of(other) == 25
    assert funded.allowance(owner, spender) == 35
    assert rc.events == (Approval(owner, spender, 35), Transfer(owner, other, 25))


def test_transfer_from_exact_allowance_zeroes_it(funded, owner, spender, other):
    funded.approve(owner, spender, 10)
    rc = funded.transfer_from(spender, owner, other, 10)
    assert rc.is_success
    assert funded.allowance(owner, spender) == 0
    assert rc.events_named("Approval") == (Approval(owner, spender, 0),)


def test_transfer_from_unlimited_never_decrements(funded, owner, spender, other):
    funded.approve(owner, spender, UNLIMITED)
    for _ in range(3):
        rc = funded.transfer_from(spender, owner, other, 5)
        assert rc.is_success
        assert rc.events_named("Approval") == ()
    assert funded.allowance(owner, spender) == U256_MAX
    assert funded.balance_of(other) == 15


def test_transfer_from_allowance_checked_before_balance(ledger, owner, spender, other):
    ledger.mint(owner, 5)
    ledger.approve(owner, spender, 3)
    rc = ledger.transfer_from(spender, owner, other, 10)
    assert rc.error == InsufficientAllowance(spender, 3, 10)


def test_transfer_from_without_allowance_reverts(funded, owner, spender, other):
    rc = funded.transfer_from(spender, owner, other, 1)
    assert rc.error == InsufficientAllowance(spender, 0, 1)


def test_transfer_from_insufficient_balance_restores_allowance(ledger, owner, spender, other):
    ledger.mint(owner, 5)
    ledger.approve(owner, spender, 50)
    before = ledger.snapshot()
    rc = ledger.transfer_from(spender, owner, other, 6)
    assert rc.error == InsufficientBalance(owner, 5, 6)
    assert rc.events == ()
    assert ledger.allowance(owner, spender) == 50
    assert ledger.snapshot() == before


def test_transfer_from_to_zero_address_reverts(funded, owner, spender):
    funded.approve(owner, spender, 10)
    rc = funded.transfer_from(spender, owner, ZERO_ADDRESS, 1)
    assert rc.error == InvalidReceiver(ZERO_ADDRESS)
    assert funded.allowance(owner, spender) == 10


def test_transfer_from_zero_owner_zero_amount_reverts_as_invalid_sender(ledger, spender, other):
    rc = ledger.transfer_from(spender, ZERO_ADDRESS, other, 0)
    assert rc.error == InvalidSender(ZERO_ADDRESS)


def test_transfer_from_via_session(funded, owner, spender, other):
    funded.connect(owner).approve(spender, 9)
    assert funded.connect(spender).transfer_from(owner, other, 9).is_success
    assert funded.balance_of(other) == 9
