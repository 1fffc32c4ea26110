"""
token_ledger.state.tables - balance/allowance tables and total supply.

`LedgerState` is the committed state owned by one `Ledger`:

- balances   : Address -> int        (absent == 0)
- allowances : (owner, spender) -> int (absent == 0)
- total_supply : int

It exposes the minimal accessor protocol (`StateAccess`) that the journal
layers on top of. Entries are never deleted; a zeroed balance stays in the
table with value 0.

`snapshot()` captures an immutable copy of the whole state, and
`StateSnapshot.root()` hashes it deterministically so two states can be
compared bit-for-bit in tests and logs.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Protocol, Tuple

from ..types.address import Address
from ..u256 import require_u256

AllowanceKey = Tuple[Address, Address]


class StateAccess(Protocol):
    def get_balance(self, address: Address) -> int: ...
    def set_balance(self, address: Address, value: int) -> None: ...
    def get_allowance(self, owner: Address, spender: Address) -> int: ...
    def set_allowance(self, owner: Address, spender: Address, value: int) -> None: ...
    def get_total_supply(self) -> int: ...
    def set_total_supply(self, value: int) -> None: ...


@dataclass(frozen=True)
class StateSnapshot:
    """Immutable copy of ledger state at one point in time."""

    balances: Mapping[Address, int]
    allowances: Mapping[AllowanceKey, int]
    total_supply: int

    def root(self) -> str:
        """
        Deterministic state digest (sha3-256, 0x-hex).

        Zero entries are skipped so an explicitly zeroed balance and a never
        credited one hash the same.
        """
        h = hashlib.sha3_256()
        h.update(b"token-ledger/state/v1|")
        h.update(self.total_supply.to_bytes(32, "big"))
        for addr in sorted(self.balances):
            v = self.balances[addr]
            if v:
                h.update(b"B" + addr.raw + v.to_bytes(32, "big"))
        for owner, spender in sorted(self.allowances):
            v = self.allowances[(owner, spender)]
            if v:
                h.update(b"A" + owner.raw + spender.raw + v.to_bytes(32, "big"))
        return "0x" + h.hexdigest()

    def balance_sum(self) -> int:
        return sum(self.balances.values())


@dataclass
class LedgerState:
    """Committed ledger tables (mutable; guarded by the owning Ledger)."""

    balances: Dict[Address, int] = field(default_factory=dict)
    allowances: Dict[AllowanceKey, int] = field(default_factory=dict)
    total_supply: int = 0

    # --- balances ---

    def get_balance(self, address: Address) -> int:
        return self.balances.get(address, 0)

    def set_balance(self, address: Address, value: int) -> None:
        require_u256(value)
        self.balances[address] = value

    # --- allowances ---

    def get_allowance(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def set_allowance(self, owner: Address, spender: Address, value: int) -> None:
        require_u256(value)
        self.allowances[(owner, spender)] = value

    # --- supply ---

    def get_total_supply(self) -> int:
        return self.total_supply

    def set_total_supply(self, value: int) -> None:
        require_u256(value)
        self.total_supply = value

    # --- inspection ---

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            balances=MappingProxyType(dict(self.balances)),
            allowances=MappingProxyType(dict(self.allowances)),
            total_supply=self.total_supply,
        )


__all__ = ["AllowanceKey", "StateAccess", "StateSnapshot", "LedgerState"]
