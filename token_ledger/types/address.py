"""
token_ledger.types.address - fixed-width opaque account identifiers.

An `Address` wraps exactly ADDRESS_LEN (20) raw bytes and compares by value, so
it can key the balance and allowance tables directly. `ZERO_ADDRESS` (twenty
zero bytes) is the reserved "no account" sentinel used as the counterparty of
mint/burn notifications.

Inputs may be given as `Address`, raw bytes, or a 0x-prefixed hex string; use
`Address.coerce(...)` at API boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

ADDRESS_LEN: Final[int] = 20

AddressLike = Union["Address", bytes, bytearray, memoryview, str]


def _hex_to_bytes(s: str) -> bytes:
    h = s.strip()
    if h.startswith(("0x", "0X")):
        h = h[2:]
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise ValueError(f"invalid hex address: {s!r}") from e


@dataclass(frozen=True, order=True)
class Address:
    """A 20-byte account identifier with value equality."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray, memoryview)):
            raise TypeError(f"address must be bytes-like, got {type(self.raw).__name__}")
        b = bytes(self.raw)
        if len(b) != ADDRESS_LEN:
            raise ValueError(f"address must be {ADDRESS_LEN} bytes, got {len(b)}")
        object.__setattr__(self, "raw", b)

    # --------------------------- construction ---------------------------

    @classmethod
    def from_hex(cls, s: str) -> "Address":
        return cls(_hex_to_bytes(s))

    @classmethod
    def coerce(cls, value: AddressLike) -> "Address":
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        raise TypeError(f"cannot interpret {type(value).__name__} as an address")

    # --------------------------- presentation ---------------------------

    @property
    def is_zero(self) -> bool:
        return self.raw == ZERO_BYTES

    def to_hex(self) -> str:
        return "0x" + self.raw.hex()

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f"Address({self.to_hex()})"


ZERO_BYTES: Final[bytes] = b"\x00" * ADDRESS_LEN
ZERO_ADDRESS: Final[Address] = Address(ZERO_BYTES)


__all__ = ["ADDRESS_LEN", "Address", "AddressLike", "ZERO_ADDRESS"]
