"""
token_ledger.types.result - Receipt container for ledger operations.

`Receipt` is the return value of every mutating ledger call. It is frozen and
serializable to JSON-friendly structures without losing integer precision.

Fields
------
* operation : str - "mint", "burn", "transfer", "transfer_from", "approve"
* status    : TxStatus - SUCCESS / REVERT
* events    : tuple[LedgerEvent, ...] - emitted notifications, in order
              (always empty on REVERT)
* error     : Optional[LedgerError] - set iff status is REVERT

Utilities
---------
* `.is_success`, `.raise_for_status()`
* `.to_dict()` / `.from_dict()`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..errors import LedgerError, LedgerRevert
from .events import LedgerEvent, event_from_dict
from .status import TxStatus


@dataclass(frozen=True)
class Receipt:
    operation: str
    status: TxStatus
    events: Tuple[LedgerEvent, ...] = ()
    error: Optional[LedgerError] = None

    def __post_init__(self) -> None:
        if not isinstance(self.events, tuple):
            object.__setattr__(self, "events", tuple(self.events))
        if self.status.is_success and self.error is not None:
            raise ValueError("successful receipt cannot carry an error")
        if not self.status.is_success:
            if self.error is None:
                raise ValueError("reverted receipt must carry an error")
            if self.events:
                raise ValueError("reverted receipt cannot carry events")

    # ----------------------------- constructors ------------------------------

    @classmethod
    def success(cls, operation: str, events: Iterable[LedgerEvent]) -> "Receipt":
        return cls(operation=operation, status=TxStatus.SUCCESS, events=tuple(events))

    @classmethod
    def revert(cls, operation: str, error: LedgerError) -> "Receipt":
        return cls(operation=operation, status=TxStatus.REVERT, error=error)

    # ----------------------------- conveniences ------------------------------

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    def raise_for_status(self) -> "Receipt":
        """Raise `LedgerRevert` if the operation reverted; return self otherwise."""
        if self.error is not None:
            raise LedgerRevert(self.error, operation=self.operation)
        return self

    def events_named(self, name: str) -> Tuple[LedgerEvent, ...]:
        return tuple(ev for ev in self.events if ev.name == name)

    # --------------------------- (de)serialization ---------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Example:
            {
              "operation": "transfer",
              "status": "success",
              "events": [{"event": "Transfer", "from": "0x…", "to": "0x…", "value": 5}],
              "error": None
            }
        """
        return {
            "operation": self.operation,
            "status": str(self.status),
            "events": [ev.to_dict() for ev in self.events],
            "error": self.error.to_dict() if self.error is not None else None,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Receipt":
        raw_events = d.get("events", [])
        if not isinstance(raw_events, (list, tuple)):
            raise TypeError("events must be a list/tuple")
        err = d.get("error")
        return cls(
            operation=str(d.get("operation", "")),
            status=TxStatus.from_str(str(d.get("status", ""))),
            events=tuple(event_from_dict(x) for x in raw_events),
            error=LedgerError.from_dict(err) if err else None,
        )


__all__ = ["Receipt"]
