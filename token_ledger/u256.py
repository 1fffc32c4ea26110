# -*- coding: utf-8 -*-
"""
token_ledger.u256
=================

Checked unsigned 256-bit helpers for ledger amounts.

Conventions
-----------
- All functions are integer-only and deterministic.
- Domain errors (not an int, a bool, negative, above U256_MAX) raise
  ``TypeError`` / ``ValueError``: they are programming errors, never ledger
  reverts.
- ``u256_add`` raises ``OverflowError`` and ``u256_sub`` raises ``ValueError``
  when the result leaves [0, U256_MAX]. Ledger code checks preconditions first
  so these only fire on a broken invariant.
"""

from __future__ import annotations

from typing import Final, Optional

U256_MAX: Final[int] = (1 << 256) - 1

# Allowance value that is never decremented by transfer_from.
UNLIMITED: Final[int] = U256_MAX


# ---------------------------------------------------------------------------
# Domain guards
# ---------------------------------------------------------------------------


def require_u256(*xs: int) -> None:
    """Raise unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        # bool is a subclass of int; reject it explicitly.
        if isinstance(x, bool) or not isinstance(x, int):
            raise TypeError(f"amount must be int, got {type(x).__name__}")
        if x < 0 or x > U256_MAX:
            raise ValueError(f"amount out of u256 range: {x}")


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def is_unlimited(allowance: int) -> bool:
    """Exact comparison against the unlimited-allowance sentinel."""
    return allowance == UNLIMITED


# ---------------------------------------------------------------------------
# Checked arithmetic
# ---------------------------------------------------------------------------


def u256_add(x: int, y: int) -> int:
    """Checked add: raise OverflowError on overflow."""
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        raise OverflowError("u256 overflow")
    return s


def u256_sub(x: int, y: int) -> int:
    """Checked sub: raise ValueError on underflow (y > x)."""
    require_u256(x, y)
    if y > x:
        raise ValueError("u256 underflow")
    return x - y


def try_add_u256(x: int, y: int) -> Optional[int]:
    """Return x+y or None on overflow/OOB."""
    if not (is_u256(x) and is_u256(y)):
        return None
    s = x + y
    return s if s <= U256_MAX else None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_amount(value: object) -> int:
    """
    Parse an amount from config/scenario input.

    Accepts ints, decimal or ``0x`` hex strings, and the literal ``"max"``
    (``U256_MAX``).
    """
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("max", "unlimited"):
            return U256_MAX
        try:
            n = int(s, 0)
        except ValueError:
            raise ValueError(f"invalid amount: {value!r}") from None
    else:
        n = value  # type: ignore[assignment]
    require_u256(n)  # type: ignore[arg-type]
    return n  # type: ignore[return-value]


__all__ = [
    "U256_MAX",
    "UNLIMITED",
    "require_u256",
    "is_u256",
    "is_unlimited",
    "u256_add",
    "u256_sub",
    "try_add_u256",
    "parse_amount",
]
