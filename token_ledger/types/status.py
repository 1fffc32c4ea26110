"""
token_ledger.types.status - canonical operation status enum.

TxStatus models the *logical* outcome of a ledger operation:
  - SUCCESS : all preconditions held and the change was committed
  - REVERT  : a precondition failed; nothing was changed

String forms:
  - str(TxStatus.SUCCESS) -> "success"   (good for logs)
  - TxStatus.SUCCESS.code  -> "SUCCESS"  (good for receipts)

`TxStatus.from_str(...)` accepts the two canonical values in any letter case
(as written by `Receipt.to_dict`, or the upper-case code form).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TxStatus(str, Enum):
    SUCCESS = "success"
    REVERT = "revert"

    @property
    def code(self) -> str:
        """Uppercase code form, e.g., 'SUCCESS' / 'REVERT'."""
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is TxStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str, *, default: Optional["TxStatus"] = None) -> "TxStatus":
        """
        Parse "success" or "revert" (case-insensitive, surrounding whitespace ignored).

        Raises:
            ValueError if parsing fails and no default is provided.
        """
        if not s:
            if default is not None:
                return default
            raise ValueError("empty status")

        norm = s.strip().lower()
        for member in cls:
            if norm == member.value:
                return member
        if default is not None:
            return default
        raise ValueError(f"unknown TxStatus: {s!r}")


__all__ = ["TxStatus"]
