"""
token_ledger.invariants - supply conservation and range checks.

Two flavours:

Full scan over a committed `LedgerState` (or a `StateSnapshot`), linear in the
number of accounts; meant for tests, debugging and `Ledger.verify()`:

- every balance and allowance lies in [0, U256_MAX]
- 0 <= total_supply <= U256_MAX
- sum(balances) == total_supply

Per-operation check over the staged writes of one checkpoint, bounded by the
entries the operation touched (at most two balances, one allowance and the
supply):

- every touched value lies in [0, U256_MAX]
- the net balance change equals the net supply change

`find_violations` / `find_delta_violations` return human-readable problems;
`check_invariants` / `check_delta` raise `InvariantViolation` when any exist.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Union

from .errors import InvariantViolation
from .state.tables import AllowanceKey, LedgerState, StateAccess, StateSnapshot
from .types.address import Address
from .u256 import is_u256


def find_violations(state: Union[LedgerState, StateSnapshot]) -> List[str]:
    problems: List[str] = []

    if not is_u256(state.total_supply):
        problems.append(f"total supply out of range: {state.total_supply}")

    for addr, bal in state.balances.items():
        if not is_u256(bal):
            problems.append(f"balance of {addr} out of range: {bal}")

    for (owner, spender), allowed in state.allowances.items():
        if not is_u256(allowed):
            problems.append(f"allowance {owner}->{spender} out of range: {allowed}")

    total = sum(state.balances.values())
    if total != state.total_supply:
        problems.append(f"sum of balances {total} != total supply {state.total_supply}")

    return problems


def check_invariants(state: Union[LedgerState, StateSnapshot]) -> None:
    problems = find_violations(state)
    if problems:
        raise InvariantViolation(
            "ledger invariant violated",
            data={"problems": problems, "total_supply": state.total_supply},
        )


def find_delta_violations(
    base: StateAccess,
    balances: Mapping[Address, int],
    allowances: Mapping[AllowanceKey, int],
    total_supply: Optional[int],
) -> List[str]:
    """Check staged writes against `base` without scanning untouched entries."""
    problems: List[str] = []

    for addr, bal in balances.items():
        if not is_u256(bal):
            problems.append(f"balance of {addr} out of range: {bal}")
    for (owner, spender), allowed in allowances.items():
        if not is_u256(allowed):
            problems.append(f"allowance {owner}->{spender} out of range: {allowed}")
    if total_supply is not None and not is_u256(total_supply):
        problems.append(f"total supply out of range: {total_supply}")
    if problems:
        return problems

    balance_delta = sum(v - base.get_balance(a) for a, v in balances.items())
    old_supply = base.get_total_supply()
    supply_delta = (total_supply if total_supply is not None else old_supply) - old_supply
    if balance_delta != supply_delta:
        problems.append(f"balance change {balance_delta} != supply change {supply_delta}")
    return problems


def check_delta(
    base: StateAccess,
    balances: Mapping[Address, int],
    allowances: Mapping[AllowanceKey, int],
    total_supply: Optional[int],
) -> None:
    problems = find_delta_violations(base, balances, allowances, total_supply)
    if problems:
        raise InvariantViolation(
            "ledger invariant violated by operation",
            data={"problems": problems, "touched": len(balances) + len(allowances)},
        )


__all__ = ["find_violations", "check_invariants", "find_delta_violations", "check_delta"]
