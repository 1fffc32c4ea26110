"""
token_ledger.cli - command line entry points.

    token-ledger info [--json]
    token-ledger replay SCENARIO [--json] [--fail-on-revert]
"""

from .ledger_cli import app

__all__ = ["app"]
