"""
token_ledger.errors - ledger error kinds and exceptions.

Expected precondition failures are *values*: each mutating ledger operation
returns a receipt that either succeeded or carries one `LedgerError` kind with
its structured arguments. Nothing is raised for them.

Kinds
-----
LedgerError (base, frozen dataclass)
 ├─ InvalidReceiver        (receiver)
 ├─ InvalidSender          (sender)
 ├─ InsufficientBalance    (sender, balance, needed)
 ├─ InsufficientAllowance  (spender, allowance, needed)
 ├─ InvalidApprover        (approver)
 ├─ InvalidSpender         (spender)
 └─ SupplyOverflow         (total_supply, amount)

Codes mirror the ERC20 custom-error names (e.g. ``ERC20InsufficientBalance``)
so receipts line up with on-chain revert data.

Exceptions
----------
* `LedgerRevert` wraps a `LedgerError` for callers that prefer exceptions
  (see `Receipt.raise_for_status`).
* `InvariantViolation` signals a broken ledger invariant. It is a bug, never an
  expected outcome.
* `ConfigError` is raised for invalid configuration values.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

from .types.address import Address


# =============================================================================
# Error kinds (values)
# =============================================================================


@dataclass(frozen=True)
class LedgerError:
    """Base for all ledger error kinds."""

    code: ClassVar[str] = "ERC20Error"

    @property
    def args(self) -> Tuple[Any, ...]:
        """Structured arguments in declaration order."""
        return tuple(getattr(self, f.name) for f in dataclasses.fields(self))

    def describe(self) -> str:
        parts = ", ".join(f"{f.name}={getattr(self, f.name)}" for f in dataclasses.fields(self))
        return f"{self.code}({parts})"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            v = getattr(self, f.name)
            out[f.name] = v.to_hex() if isinstance(v, Address) else v
        return {"code": self.code, "args": out}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LedgerError":
        code = str(d.get("code", ""))
        kind = ERROR_KINDS.get(code)
        if kind is None:
            raise ValueError(f"unknown ledger error code: {code!r}")
        raw = d.get("args") or {}
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(kind):
            v = raw[f.name]
            kwargs[f.name] = Address.coerce(v) if f.type in ("Address", Address) else int(v)
        return kind(**kwargs)

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class InvalidReceiver(LedgerError):
    code: ClassVar[str] = "ERC20InvalidReceiver"
    receiver: Address


@dataclass(frozen=True)
class InvalidSender(LedgerError):
    code: ClassVar[str] = "ERC20InvalidSender"
    sender: Address


@dataclass(frozen=True)
class InsufficientBalance(LedgerError):
    code: ClassVar[str] = "ERC20InsufficientBalance"
    sender: Address
    balance: int
    needed: int


@dataclass(frozen=True)
class InsufficientAllowance(LedgerError):
    code: ClassVar[str] = "ERC20InsufficientAllowance"
    spender: Address
    allowance: int
    needed: int


@dataclass(frozen=True)
class InvalidApprover(LedgerError):
    code: ClassVar[str] = "ERC20InvalidApprover"
    approver: Address


@dataclass(frozen=True)
class InvalidSpender(LedgerError):
    code: ClassVar[str] = "ERC20InvalidSpender"
    spender: Address


@dataclass(frozen=True)
class SupplyOverflow(LedgerError):
    code: ClassVar[str] = "ERC20SupplyOverflow"
    total_supply: int
    amount: int


ERROR_KINDS: Dict[str, Type[LedgerError]] = {
    k.code: k
    for k in (
        InvalidReceiver,
        InvalidSender,
        InsufficientBalance,
        InsufficientAllowance,
        InvalidApprover,
        InvalidSpender,
        SupplyOverflow,
    )
}


# =============================================================================
# Exceptions
# =============================================================================


@dataclass(eq=False)
class LedgerException(Exception):
    """
    Base exception.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string.
        data:    Optional structured details (kept JSON-serializable).
    """

    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class LedgerRevert(LedgerException):
    """A ledger operation reverted with `error`."""

    def __init__(self, error: LedgerError, *, operation: Optional[str] = None):
        msg = f"{operation} reverted: {error.describe()}" if operation else error.describe()
        super().__init__(message=msg, code=error.code, data=error.to_dict()["args"])
        self.error = error
        self.operation = operation


class InvariantViolation(LedgerException):
    """A ledger invariant does not hold after a committed operation."""

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STATE_INVARIANT", data=data)


class ConfigError(ValueError):
    """Invalid configuration value or file."""


__all__ = [
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
