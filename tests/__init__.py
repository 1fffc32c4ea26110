"""
Test helpers shared by unit and property tests.

    from tests import det_address, INITIAL_SUPPLY
"""
from __future__ import annotations

import hashlib

from token_ledger import Address

INITIAL_SUPPLY = 100


def det_address(label: str) -> Address:
    """Stable 20-byte address for a test label."""
    return Address(hashlib.sha3_256(b"token-ledger/test/" + label.encode()).digest()[-20:])


__all__ = ["INITIAL_SUPPLY", "det_address"]
