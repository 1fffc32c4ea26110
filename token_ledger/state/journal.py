"""
token_ledger.state.journal - journaling writes, checkpoints, revert/commit.

This module provides a deterministic, in-memory write journal layered over a
`LedgerState`. It supports nested checkpoints via a stack of overlays. Writes
go to the top overlay; reads consult overlays from top → base. `commit()`
merges the top overlay into the next layer (or the base state if it is the
last one). `revert()` discards the top overlay.

Intended usage
--------------
    j = Journal(state)
    j.begin()
    j.set_balance(addr, j.get_balance(addr) + 5)
    if failed:
        j.revert()                  # base untouched
    else:
        j.commit()                  # applied to base

The journal does not enforce ledger rules; `token_ledger.ledger` validates
before writing.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from ..types.address import Address
from ..u256 import require_u256
from .tables import AllowanceKey, StateAccess


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """A single journal layer of staged writes."""

    balances: Dict[Address, int] = field(default_factory=dict)
    allowances: Dict[AllowanceKey, int] = field(default_factory=dict)
    total_supply: Optional[int] = None


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    A write journal with nested checkpoints over any `StateAccess` (usually a `LedgerState`).

    API highlights
    --------------
    - begin() / commit() / revert(), depth(), pending()
    - atomic() context manager (commit on success, revert on exception)
    - the `StateAccess` accessors: get/set_balance, get/set_allowance,
      get/set_total_supply
    """

    def __init__(self, base: StateAccess) -> None:
        self._base = base
        self._layers: List[_Overlay] = []

    @property
    def base(self) -> StateAccess:
        return self._base

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base state."""
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            parent = self._layers[-1]
            parent.balances.update(top.balances)
            parent.allowances.update(top.allowances)
            if top.total_supply is not None:
                parent.total_supply = top.total_supply
        else:
            self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    @contextmanager
    def atomic(self) -> Iterator["Journal"]:
        self.begin()
        try:
            yield self
        except BaseException:
            self.revert()
            raise
        else:
            self.commit()

    def pending(self) -> Tuple[Dict[Address, int], Dict[AllowanceKey, int], Optional[int]]:
        """Staged writes of the top checkpoint: (balances, allowances, total_supply or None)."""
        top = self._top()
        return dict(top.balances), dict(top.allowances), top.total_supply

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, v in layer.balances.items():
            self._base.set_balance(addr, v)
        for (owner, spender), v in layer.allowances.items():
            self._base.set_allowance(owner, spender, v)
        if layer.total_supply is not None:
            self._base.set_total_supply(layer.total_supply)

    def _top(self) -> _Overlay:
        if not self._layers:
            raise RuntimeError("write outside of a checkpoint")
        return self._layers[-1]

    # --------------------------------------------------------------------- #
    # Reads (top → base)
    # --------------------------------------------------------------------- #

    def get_balance(self, address: Address) -> int:
        for layer in reversed(self._layers):
            if address in layer.balances:
                return layer.balances[address]
        return self._base.get_balance(address)

    def get_allowance(self, owner: Address, spender: Address) -> int:
        key = (owner, spender)
        for layer in reversed(self._layers):
            if key in layer.allowances:
                return layer.allowances[key]
        return self._base.get_allowance(owner, spender)

    def get_total_supply(self) -> int:
        for layer in reversed(self._layers):
            if layer.total_supply is not None:
                return layer.total_supply
        return self._base.get_total_supply()

    # --------------------------------------------------------------------- #
    # Writes (top overlay only)
    # --------------------------------------------------------------------- #

    def set_balance(self, address: Address, value: int) -> None:
        require_u256(value)
        self._top().balances[address] = value

    def set_allowance(self, owner: Address, spender: Address, value: int) -> None:
        require_u256(value)
        self._top().allowances[(owner, spender)] = value

    def set_total_supply(self, value: int) -> None:
        require_u256(value)
        self._top().total_supply = value


__all__ = ["Journal"]
