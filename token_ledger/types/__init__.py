"""
token_ledger.types - value types shared across the ledger.

Re-exports: Address / ZERO_ADDRESS, TxStatus and the Transfer / Approval events.
"""

from .address import ADDRESS_LEN, Address, AddressLike, ZERO_ADDRESS
from .events import Approval, LedgerEvent, Transfer, event_from_dict
from .status import TxStatus

__all__ = [
    "ADDRESS_LEN",
    "Address",
    "AddressLike",
    "ZERO_ADDRESS",
    "Approval",
    "LedgerEvent",
    "Transfer",
    "event_from_dict",
    "TxStatus",
]
