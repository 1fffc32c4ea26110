from __future__ import annotations

import pytest

from token_ledger.state import Journal, LedgerState
from tests import det_address

A = det_address("a")
B = det_address("b")


def test_revert_discards_writes():
    st = LedgerState()
    j = Journal(st)
    j.begin()
    j.set_balance(A, 10)
    j.set_total_supply(10)
    assert j.get_balance(A) == 10
    j.revert()
    assert st.get_balance(A) == 0
    assert st.total_supply == 0
    assert j.depth() == 0


def test_commit_applies_to_base():
    st = LedgerState()
    j = Journal(st)
    j.begin()
    j.set_balance(A, 3)
    j.set_allowance(A, B, 7)
    j.set_total_supply(3)
    j.commit()
    assert st.get_balance(A) == 3
    assert st.get_allowance(A, B) == 7
    assert st.get_total_supply() == 3


def test_nested_inner_revert_keeps_outer_writes():
    st = LedgerState()
    j = Journal(st)
    assert j.begin() == 1
    j.set_balance(A, 1)
    assert j.begin() == 2
    j.set_balance(A, 2)
    j.set_balance(B, 5)
    j.revert()
    assert j.get_balance(A) == 1
    assert j.get_balance(B) == 0
    j.commit()
    assert st.balances == {A: 1}


def test_nested_commit_merges_into_parent():
    st = LedgerState()
    j = Journal(st)
    j.begin()
    j.begin()
    j.set_total_supply(9)
    j.commit()
    assert st.total_supply == 0
    assert j.get_total_supply() == 9
    j.commit()
    assert st.total_supply == 9


def test_atomic_context_manager():
    st = LedgerState()
    j = Journal(st)
    with j.atomic():
        j.set_balance(A, 4)
    assert st.get_balance(A) == 4
    with pytest.raises(KeyError):
        with j.atomic():
            j.set_balance(A, 99)
            raise KeyError("x")
    assert st.get_balance(A) == 4


def test_misuse_is_rejected():
    j = Journal(LedgerState())
    with pytest.raises(RuntimeError):
        j.set_balance(A, 1)
    with pytest.raises(RuntimeError):
        j.commit()
    with pytest.raises(RuntimeError):
        j.revert()


def test_writes_are_range_checked():
    j = Journal(LedgerState())
    j.begin()
    with pytest.raises(ValueError):
        j.set_balance(A, -1)
    with pytest.raises(TypeError):
        j.set_total_supply("1")  # type: ignore[arg-type]
