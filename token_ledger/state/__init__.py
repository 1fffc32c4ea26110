"""
token_ledger.state - committed tables and the write journal.
"""

from .journal import Journal
from .tables import AllowanceKey, LedgerState, StateAccess, StateSnapshot

__all__ = ["AllowanceKey", "Journal", "LedgerState", "StateAccess", "StateSnapshot"]
