"""
token_ledger.types.events - notification records emitted by the ledger.

Two kinds, both frozen and hashable:

* `Transfer(sender, receiver, value)` - balance movement. Mint uses
  ZERO_ADDRESS as `sender`, burn uses it as `receiver`.
* `Approval(owner, spender, value)` - allowance set or decremented.

`to_dict()` / `event_from_dict()` convert to/from JSON-friendly forms with hex
addresses (``{"event": "Transfer", "from": "0x..", "to": "0x..", "value": 1}``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from .address import Address


@dataclass(frozen=True)
class Transfer:
    sender: Address
    receiver: Address
    value: int

    name = "Transfer"

    @property
    def args(self):
        return (self.sender, self.receiver, self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "from": self.sender.to_hex(),
            "to": self.receiver.to_hex(),
            "value": self.value,
        }


@dataclass(frozen=True)
class Approval:
    owner: Address
    spender: Address
    value: int

    name = "Approval"

    @property
    def args(self):
        return (self.owner, self.spender, self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "owner": self.owner.to_hex(),
            "spender": self.spender.to_hex(),
            "value": self.value,
        }


LedgerEvent = Union[Transfer, Approval]


def event_from_dict(d: Mapping[str, Any]) -> LedgerEvent:
    kind = d.get("event")
    if kind == Transfer.name:
        return Transfer(Address.coerce(d["from"]), Address.coerce(d["to"]), int(d["value"]))
    if kind == Approval.name:
        return Approval(Address.coerce(d["owner"]), Address.coerce(d["spender"]), int(d["value"]))
    raise ValueError(f"unknown event kind: {kind!r}")


__all__ = ["Transfer", "Approval", "LedgerEvent", "event_from_dict"]
