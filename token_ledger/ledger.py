"""
ERC-20-like fungible token ledger
=================================

Deterministic, in-memory balance/allowance ledger with explicit callers.

Highlights
----------
- Explicit `caller` parameters for caller-sensitive calls (no ambient sender);
  `Ledger.connect(caller)` binds one for convenience.
- Every mutating call returns a `Receipt`. Precondition failures come back as
  a REVERT receipt carrying a `LedgerError` kind; nothing is raised for them.
- Each operation runs under the ledger lock inside a journal checkpoint, so it
  is applied completely or not at all.
- Notifications (committed operations only):
    - Transfer(from, to, value)
    - Approval(owner, spender, value)
- U256-checked math via `token_ledger.u256` (no silent wrap).
- Usable as a context manager; leaving the block closes the event sink.

Public interface
----------------
# metadata / views
name() -> str
symbol() -> str
decimals() -> int
total_supply() -> int
balance_of(account) -> int
allowance(owner, spender) -> int

# state-changing
mint(account, amount) -> Receipt
burn(account, amount) -> Receipt
transfer(caller, to, amount) -> Receipt
transfer_from(caller, owner, to, amount) -> Receipt
approve(caller, spender, amount) -> Receipt

Notes
-----
- Addresses may be passed as `Address`, 20 raw bytes or 0x-hex strings.
- Amounts must be ints in [0, 2**256 - 1]; anything else raises
  TypeError/ValueError before the ledger is touched.
- An allowance equal to U256_MAX is unlimited: transfer_from never lowers it
  and emits no Approval for it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import DEFAULT_DECIMALS, DEFAULT_NAME, DEFAULT_SYMBOL, LedgerConfig, load_config
from .errors import (InsufficientAllowance, InsufficientBalance, InvalidApprover,
                     InvalidReceiver, InvalidSender, InvalidSpender, LedgerError,
                     SupplyOverflow)
from .invariants import check_delta, check_invariants
from .logging import get_logger
from .sinks import EventRecord, EventSink, InMemoryEventSink, JsonlEventSink
from .state.journal import Journal
from .state.tables import LedgerState, StateSnapshot
from .types.address import ZERO_ADDRESS, Address, AddressLike
from .types.events import Approval, LedgerEvent, Transfer
from .types.result import Receipt
from .u256 import is_unlimited, require_u256, try_add_u256, u256_add, u256_sub

_log = get_logger(__name__)

Subscriber = Callable[[EventRecord], None]


@dataclass
class _Frame:
    """Events staged by the operation currently executing."""

    events: List[LedgerEvent] = field(default_factory=list)

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)


class Ledger:
    """The token ledger. One instance owns one `LedgerState`."""

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        symbol: str = DEFAULT_SYMBOL,
        decimals: int = DEFAULT_DECIMALS,
        *,
        sink: Optional[EventSink] = None,
        check_invariants: bool = True,
    ) -> None:
        # Validates metadata (ConfigError on bad values).
        meta = LedgerConfig(name=name, symbol=symbol, decimals=decimals)
        self._name = meta.name
        self._symbol = meta.symbol
        self._decimals = meta.decimals
        self._check = check_invariants

        self._lock = threading.RLock()
        self._state = LedgerState()
        self._journal = Journal(self._state)
        self._sink: EventSink = sink if sink is not None else InMemoryEventSink()
        self._subscribers: List[Subscriber] = []
        self._op_index = 0

    @classmethod
    def from_config(
        cls, cfg: Optional[LedgerConfig] = None, *, sink: Optional[EventSink] = None
    ) -> "Ledger":
        """Build a ledger from `cfg` (default: `load_config()`)."""
        cfg = cfg if cfg is not None else load_config()
        if sink is None and cfg.event_log_path is not None:
            sink = JsonlEventSink(cfg.event_log_path)
        return cls(
            cfg.name,
            cfg.symbol,
            cfg.decimals,
            sink=sink,
            check_invariants=cfg.check_invariants,
        )

    def __repr__(self) -> str:
        return f"Ledger(symbol={self._symbol!r}, total_supply={self.total_supply()})"

    # ------------------------------------------------------------------
    # Metadata (pure)
    # ------------------------------------------------------------------

    def name(self) -> str:
        return self._name

    def symbol(self) -> str:
        return self._symbol

    def decimals(self) -> int:
        return self._decimals

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def total_supply(self) -> int:
        with self._lock:
            return self._state.get_total_supply()

    def balance_of(self, account: AddressLike) -> int:
        addr = Address.coerce(account)
        with self._lock:
            return self._state.get_balance(addr)

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        o, s = Address.coerce(owner), Address.coerce(spender)
        with self._lock:
            return self._state.get_allowance(o, s)

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return self._state.snapshot()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @property
    def sink(self) -> EventSink:
        return self._sink

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback` for committed events. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def close(self) -> None:
        self._sink.close()

    def __enter__(self) -> "Ledger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def verify(self) -> None:
        """Full scan of the committed state; raises `InvariantViolation` on any problem."""
        with self._lock:
            check_invariants(self._state)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mint(self, account: AddressLike, amount: int) -> Receipt:
        to = Address.coerce(account)
        require_u256(amount)

        def body(frame: _Frame) -> Optional[LedgerError]:
            if to.is_zero:
                return InvalidReceiver(ZERO_ADDRESS)
            return self._update(frame, ZERO_ADDRESS, to, amount)

        return self._execute("mint", body)

    def burn(self, account: AddressLike, amount: int) -> Receipt:
        src = Address.coerce(account)
        require_u256(amount)

        def body(frame: _Frame) -> Optional[LedgerError]:
            if src.is_zero:
                return InvalidSender(ZERO_ADDRESS)
            return self._update(frame, src, ZERO_ADDRESS, amount)

        return self._execute("burn", body)

    def transfer(self, caller: AddressLike, to: AddressLike, amount: int) -> Receipt:
        src, dst = Address.coerce(caller), Address.coerce(to)
        require_u256(amount)

        def body(frame: _Frame) -> Optional[LedgerError]:
            return self._transfer(frame, src, dst, amount)

        return self._execute("transfer", body)

    def transfer_from(
        self, caller: AddressLike, owner: AddressLike, to: AddressLike, amount: int
    ) -> Receipt:
        """
        Spender (`caller`) moves `amount` from `owner` to `to` using its allowance.

        The allowance is checked (and spent) first, so an insufficient
        allowance is reported even when the owner's balance is short too.
        """
        spender, src, dst = Address.coerce(caller), Address.coerce(owner), Address.coerce(to)
        require_u256(amount)

        def body(frame: _Frame) -> Optional[LedgerError]:
            err = self._spend_allowance(frame, src, spender, amount)
            if err is not None:
                return err
            return self._transfer(frame, src, dst, amount)

        return self._execute("transfer_from", body)

    def approve(self, caller: AddressLike, spender: AddressLike, amount: int) -> Receipt:
        owner, sp = Address.coerce(caller), Address.coerce(spender)
        require_u256(amount)

        def body(frame: _Frame) -> Optional[LedgerError]:
            return self._approve(frame, owner, sp, amount)

        return self._execute("approve", body)

    def connect(self, caller: AddressLike) -> "LedgerSession":
        return LedgerSession(self, Address.coerce(caller))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, operation: str, body: Callable[[_Frame], Optional[LedgerError]]) -> Receipt:
        with self._lock:
            frame = _Frame()
            self._journal.begin()
            try:
                error = body(frame)
            except BaseException:
                self._journal.revert()
                raise

            if error is not None:
                self._journal.revert()
                _log.info(
                    "%s reverted: %s",
                    operation,
                    error.describe(),
                    extra={"operation": operation, "code": error.code},
                )
                return Receipt.revert(operation, error)

            if self._check:
                try:
                    check_delta(self._state, *self._journal.pending())
                except BaseException:
                    self._journal.revert()
                    raise
            self._journal.commit()

            receipt = Receipt.success(operation, frame.events)
            self._publish(operation, receipt)
            _log.debug(
                "%s committed",
                operation,
                extra={"operation": operation, "events": len(receipt.events)},
            )
            return receipt

    def _publish(self, operation: str, receipt: Receipt) -> None:
        """
        Record the events of a committed operation, then notify subscribers.

        The whole operation reaches the sink before any callback runs, so an
        operation started from a callback lands after it. State is already
        committed here: sink and subscriber failures are logged, not raised.
        """
        op_index = self._op_index
        self._op_index += 1
        records: List[EventRecord] = []
        for log_index, event in enumerate(receipt.events):
            try:
                rec = self._sink.append(event, op_index=op_index, log_index=log_index, operation=operation)
            except Exception:
                _log.exception(
                    "event sink append failed",
                    extra={"operation": operation, "op_index": op_index, "log_index": log_index},
                )
                rec = EventRecord(op_index=op_index, log_index=log_index, operation=operation, event=event)
            records.append(rec)

        for rec in records:
            for cb in list(self._subscribers):
                try:
                    cb(rec)
                except Exception:
                    _log.exception("event subscriber failed", extra={"operation": operation})

    def _update(
        self, frame: _Frame, sender: Address, receiver: Address, value: int
    ) -> Optional[LedgerError]:
        """Move `value` from `sender` to `receiver`; ZERO_ADDRESS mints/burns."""
        j = self._journal
        if sender.is_zero:
            supply = j.get_total_supply()
            if try_add_u256(supply, value) is None:
                return SupplyOverflow(supply, value)
            j.set_total_supply(supply + value)
        else:
            balance = j.get_balance(sender)
            if balance < value:
                return InsufficientBalance(sender, balance, value)
            j.set_balance(sender, balance - value)

        if receiver.is_zero:
            j.set_total_supply(u256_sub(j.get_total_supply(), value))
        else:
            j.set_balance(receiver, u256_add(j.get_balance(receiver), value))

        frame.emit(Transfer(sender, receiver, value))
        return None

    def _transfer(
        self, frame: _Frame, sender: Address, receiver: Address, value: int
    ) -> Optional[LedgerError]:
        if sender.is_zero:
            return InvalidSender(ZERO_ADDRESS)
        if receiver.is_zero:
            return InvalidReceiver(ZERO_ADDRESS)
        return self._update(frame, sender, receiver, value)

    def _approve(
        self, frame: _Frame, owner: Address, spender: Address, value: int
    ) -> Optional[LedgerError]:
        if owner.is_zero:
            return InvalidApprover(ZERO_ADDRESS)
        if spender.is_zero:
            return InvalidSpender(ZERO_ADDRESS)
        self._journal.set_allowance(owner, spender, value)
        frame.emit(Approval(owner, spender, value))
        return None

    def _spend_allowance(
        self, frame: _Frame, owner: Address, spender: Address, value: int
    ) -> Optional[LedgerError]:
        current = self._journal.get_allowance(owner, spender)
        # Sentinel compared before any arithmetic.
        if is_unlimited(current):
            return None
        if current < value:
            return InsufficientAllowance(spender, current, value)
        remaining = current - value
        self._journal.set_allowance(owner, spender, remaining)
        frame.emit(Approval(owner, spender, remaining))
        return None


class LedgerSession:
    """A ledger handle bound to one caller identity."""

    def __init__(self, ledger: Ledger, caller: Address) -> None:
        self._ledger = ledger
        self._caller = caller

    @property
    def caller(self) -> Address:
        return self._caller

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def transfer(self, to: AddressLike, amount: int) -> Receipt:
        return self._ledger.transfer(self._caller, to, amount)

    def transfer_from(self, owner: AddressLike, to: AddressLike, amount: int) -> Receipt:
        return self._ledger.transfer_from(self._caller, owner, to, amount)

    def approve(self, spender: AddressLike, amount: int) -> Receipt:
        return self._ledger.approve(self._caller, spender, amount)

    def balance(self) -> int:
        return self._ledger.balance_of(self._caller)

    def __repr__(self) -> str:
        return f"LedgerSession(caller={self._caller})"


__all__ = ["Ledger", "LedgerSession", "Subscriber"]
