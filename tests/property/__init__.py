# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Shared Hypothesis configuration for property-based ledger tests.

What this does on import:
- Registers named Hypothesis profiles (dev/ci/fast).
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Exposes strategies for addresses, amounts and ledger operations.

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

from token_ledger import U256_MAX, ZERO_ADDRESS, Address
from tests import det_address

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)


# ---- strategies --------------------------------------------------------------

# A small fixed population makes collisions (self-transfers, repeat spenders) likely.
ACCOUNTS: Final[Tuple[Address, ...]] = tuple(det_address(f"acct-{i}") for i in range(4))


def addresses(include_zero: bool = True):
    pool = ACCOUNTS + ((ZERO_ADDRESS,) if include_zero else ())
    return st.sampled_from(pool)


def amounts():
    """Mostly small values, with the u256 edges mixed in."""
    return st.one_of(
        st.integers(min_value=0, max_value=1_000),
        st.sampled_from([0, 1, U256_MAX - 1, U256_MAX]),
        st.integers(min_value=0, max_value=U256_MAX),
    )


def operations():
    """(method name, positional args) tuples for Ledger mutations."""
    a = addresses()
    n = amounts()
    return st.one_of(
        st.tuples(st.just("mint"), st.tuples(a, n)),
        st.tuples(st.just("burn"), st.tuples(a, n)),
        st.tuples(st.just("transfer"), st.tuples(a, a, n)),
        st.tuples(st.just("transfer_from"), st.tuples(a, a, a, n)),
        st.tuples(st.just("approve"), st.tuples(a, a, n)),
    )


def is_ci() -> bool:
    return _env_truthy("CI")


def active_profile() -> str:
    return _active


__all__ = [
    "st",
    "given",
    "ACCOUNTS",
    "addresses",
    "amounts",
    "operations",
    "is_ci",
    "active_profile",
]
