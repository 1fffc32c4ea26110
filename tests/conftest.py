"""
Shared pytest fixtures:
- Fresh default ledger ("TOKEN" / "TKN" / 18) with an in-memory sink
- Deterministic accounts (owner, user, other, spender) derived from labels
- Isolation from TOKEN_LEDGER_* environment variables
"""
from __future__ import annotations

import os

import pytest

from token_ledger import Address, InMemoryEventSink, Ledger

from tests import INITIAL_SUPPLY, det_address


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host TOKEN_LEDGER_* settings out of tests."""
    for key in list(os.environ):
        if key.startswith("TOKEN_LEDGER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def ledger(sink: InMemoryEventSink) -> Ledger:
    return Ledger(sink=sink)


@pytest.fixture
def owner() -> Address:
    return det_address("owner")


@pytest.fixture
def user() -> Address:
    return det_address("user")


@pytest.fixture
def other() -> Address:
    return det_address("other")


@pytest.fixture
def spender() -> Address:
    return det_address("spender")


@pytest.fixture
def funded(ledger: Ledger, owner: Address) -> Ledger:
    """Ledger with INITIAL_SUPPLY minted to `owner`."""
    ledger.mint(owner, INITIAL_SUPPLY).raise_for_status()
    return ledger
