"""
Reference scenarios on a fresh default ledger.

  1. mint 1000 to U
  2. after 1: burn 1001 from U reverts, state unchanged
  3. after 1: burn 1000 from U empties the ledger
  4. unlimited allowance is never decremented by transfer_from
  5. insufficient allowance wins over a sufficient balance
"""
from __future__ import annotations

import pytest

from token_ledger import (UNLIMITED, ZERO_ADDRESS, InsufficientAllowance, InsufficientBalance,
                          Ledger, Transfer)
from tests import det_address

U = det_address("U")
OWNER = det_address("scenario-owner")
OTHER = det_address("scenario-other")


@pytest.fixture
def after_mint() -> Ledger:
    led = Ledger()
    led.mint(U, 1000).raise_for_status()
    return led


def test_scenario_1_mint():
    led = Ledger()
    assert led.total_supply() == 0
    rc = led.mint(U, 1000)
    assert led.total_supply() == 1000
    assert led.balance_of(U) == 1000
    assert rc.events == (Transfer(ZERO_ADDRESS, U, 1000),)


def test_scenario_2_burn_above_balance(after_mint):
    before = after_mint.snapshot()
    rc = after_mint.burn(U, 1001)
    assert not rc.is_success
    assert rc.error == InsufficientBalance(U, 1000, 1001)
    assert after_mint.snapshot() == before
    assert after_mint.snapshot().root() == before.root()


def test_scenario_3_burn_everything(after_mint):
    rc = after_mint.burn(U, 1000)
    assert after_mint.total_supply() == 0
    assert after_mint.balance_of(U) == 0
    assert rc.events == (Transfer(U, ZERO_ADDRESS, 1000),)


def test_scenario_4_unlimited_allowance():
    led = Ledger()
    led.mint(OWNER, 1000)
    led.approve(OWNER, U, UNLIMITED)
    rc = led.transfer_from(U, OWNER, OTHER, 1)
    assert rc.is_success
    assert led.balance_of(OWNER) == 999
    assert led.balance_of(OTHER) == 1
    assert led.allowance(OWNER, U) == UNLIMITED
    assert rc.events_named("Approval") == ()


def test_scenario_5_allowance_checked_first():
    led = Ledger()
    led.mint(OWNER, 1000)
    led.approve(OWNER, U, 999)
    rc = led.transfer_from(U, OWNER, OTHER, 1000)
    assert rc.error == InsufficientAllowance(U, 999, 1000)
    assert led.balance_of(OWNER) == 1000
    assert led.allowance(OWNER, U) == 999
