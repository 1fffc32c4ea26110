"""
Version helpers for token_ledger.

- Exposes __version__.
- Resolution order:
    1) TOKEN_LEDGER_VERSION env var (authoritative override)
    2) installed distribution metadata for "token-ledger"
    3) fallback DEFAULT_VERSION

Safe to import very early; no third-party dependencies.
"""

from __future__ import annotations

import os
from importlib import metadata
from typing import Optional

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "token-ledger"


def _from_env() -> Optional[str]:
    v = os.environ.get("TOKEN_LEDGER_VERSION", "").strip()
    return v or None


def _from_metadata() -> Optional[str]:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return None


def get_version() -> str:
    return _from_env() or _from_metadata() or DEFAULT_VERSION


__version__ = get_version()

__all__ = ["__version__", "get_version", "DEFAULT_VERSION"]
