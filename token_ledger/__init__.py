"""
token_ledger - an ERC-20-style fungible token ledger.

    from token_ledger import Ledger, Address

    ledger = Ledger()                     # "TOKEN" / "TKN" / 18 decimals
    alice = Address.from_hex("0x" + "11" * 20)
    ledger.mint(alice, 1_000).raise_for_status()
    ledger.balance_of(alice)              # 1000
"""

from __future__ import annotations

# errors first: types.result depends on it
from .errors import (ERROR_KINDS, ConfigError, InsufficientAllowance, InsufficientBalance,
                     InvalidApprover, InvalidReceiver, InvalidSender, InvalidSpender,
                     InvariantViolation, LedgerError, LedgerException, LedgerRevert,
                     SupplyOverflow)
from .types.address import ZERO_ADDRESS, Address
from .types.events import Approval, Transfer
from .types.result import Receipt
from .types.status import TxStatus
from .u256 import U256_MAX, UNLIMITED
from .config import LedgerConfig, load_config
from .sinks import EventRecord, EventSink, InMemoryEventSink, JsonlEventSink, NullEventSink
from .ledger import Ledger, LedgerSession
from .version import __version__

__all__ = [
    "__version__",
    "Ledger",
    "LedgerSession",
    "LedgerConfig",
    "load_config",
    "Address",
    "ZERO_ADDRESS",
    "U256_MAX",
    "UNLIMITED",
    "Transfer",
    "Approval",
    "Receipt",
    "TxStatus",
    "EventRecord",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "NullEventSink",
    "LedgerError",
    "InvalidReceiver",
    "InvalidSender",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InvalidApprover",
    "InvalidSpender",
    "SupplyOverflow",
    "ERROR_KINDS",
    "LedgerException",
    "LedgerRevert",
    "InvariantViolation",
    "ConfigError",
]
