"""
token_ledger.config - token metadata defaults, invariant checking, logging knobs.

Configuration precedence:
  1) Environment variables (TOKEN_LEDGER_*)
  2) Optional config file named by TOKEN_LEDGER_CONFIG_FILE (.json / .yaml / .yml)
  3) Hardcoded defaults below

Key env vars:
  - TOKEN_LEDGER_NAME               (str)    default: "TOKEN"
  - TOKEN_LEDGER_SYMBOL             (str)    default: "TKN"
  - TOKEN_LEDGER_DECIMALS           (int)    default: 18      (0..36)
  - TOKEN_LEDGER_CHECK_INVARIANTS   (bool)   default: true
  - TOKEN_LEDGER_EVENT_LOG          (path)   default: unset   (JSONL event sink)
  - TOKEN_LEDGER_LOG_LEVEL          (str)    default: "INFO"
  - TOKEN_LEDGER_LOG_FORMAT         (str)    default: "text"  (text|json)

File keys use the field names of `LedgerConfig` (``name``, ``symbol``,
``decimals``, ``check_invariants``, ``event_log_path``, ``log_level``,
``log_format``).

Usage:
    from token_ledger.config import load_config
    cfg = load_config()
    ledger = Ledger.from_config(cfg)
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

DEFAULT_NAME = "TOKEN"
DEFAULT_SYMBOL = "TKN"
DEFAULT_DECIMALS = 18
MAX_DECIMALS = 36

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LOG_FORMATS = ("text", "json")

ENV_PREFIX = "TOKEN_LEDGER_"


# ----------------------------- helpers ---------------------------------------


def _parse_bool(raw: Any, *, key: str) -> bool:
    if isinstance(raw, bool):
        return raw
    val = str(raw).strip().lower()
    if val in ("1", "true", "t", "yes", "y", "on"):
        return True
    if val in ("0", "false", "f", "no", "n", "off"):
        return False
    raise ConfigError(f"{key}: expected a boolean, got {raw!r}")


def _parse_int(raw: Any, *, key: str) -> int:
    if isinstance(raw, bool):
        raise ConfigError(f"{key}: expected an integer, got {raw!r}")
    try:
        return int(raw, 0) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected an integer, got {raw!r}") from None


def _is_printable_ascii(s: str) -> bool:
    return len(s) > 0 and all(32 <= ord(c) <= 126 for c in s)


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    # Token metadata (immutable once a ledger is built)
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    decimals: int = DEFAULT_DECIMALS

    # Check the entries each operation touched (range and supply balance) before commit
    check_invariants: bool = True

    # Optional JSONL event log
    event_log_path: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.name, str) or not _is_printable_ascii(self.name) or len(self.name) > 64:
            raise ConfigError(f"name must be 1..64 printable ASCII characters, got {self.name!r}")
        if not isinstance(self.symbol, str) or not _is_printable_ascii(self.symbol) or len(self.symbol) > 11:
            raise ConfigError(f"symbol must be 1..11 printable ASCII characters, got {self.symbol!r}")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ConfigError(f"decimals must be an integer, got {self.decimals!r}")
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ConfigError(f"decimals must be in [0, {MAX_DECIMALS}], got {self.decimals}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}")
        if self.log_format.lower() not in _LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {_LOG_FORMATS}, got {self.log_format!r}")

    def with_overrides(self, **changes: Any) -> "LedgerConfig":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["event_log_path"] = str(self.event_log_path) if self.event_log_path else None
        return d


# ------------------------------- loading -------------------------------------


def load_file(path: str | os.PathLike) -> Dict[str, Any]:
    """Read a JSON or YAML mapping from `path`."""
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {p}: {e}") from e
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse config file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {p} must contain a mapping")
    return data


def _from_mapping(raw: Mapping[str, Any], base: LedgerConfig) -> LedgerConfig:
    known = set(LedgerConfig.__dataclass_fields__)
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
    changes: Dict[str, Any] = {}
    for key, val in raw.items():
        if key == "decimals":
            changes[key] = _parse_int(val, key=key)
        elif key == "check_invariants":
            changes[key] = _parse_bool(val, key=key)
        elif key == "event_log_path":
            changes[key] = Path(str(val)).expanduser() if val else None
        else:
            changes[key] = str(val)
    return replace(base, **changes)


def _from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    mapping = {
        "NAME": "name",
        "SYMBOL": "symbol",
        "DECIMALS": "decimals",
        "CHECK_INVARIANTS": "check_invariants",
        "EVENT_LOG": "event_log_path",
        "LOG_LEVEL": "log_level",
        "LOG_FORMAT": "log_format",
    }
    out: Dict[str, Any] = {}
    for suffix, key in mapping.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None and raw.strip() != "":
            out[key] = raw.strip()
    return out


def load_config(
    env: Optional[Mapping[str, str]] = None, *, config_file: Optional[str | os.PathLike] = None
) -> LedgerConfig:
    """
    Build a LedgerConfig from defaults, an optional file, and the environment.

    `env` defaults to ``os.environ``; `config_file` overrides
    TOKEN_LEDGER_CONFIG_FILE.
    """
    env = os.environ if env is None else env
    cfg = LedgerConfig()

    path = config_file or env.get(ENV_PREFIX + "CONFIG_FILE")
    if path:
        cfg = _from_mapping(load_file(path), cfg)

    return _from_mapping(_from_env(env), cfg)


__all__ = [
    "DEFAULT_NAME",
    "DEFAULT_SYMBOL",
    "DEFAULT_DECIMALS",
    "LedgerConfig",
    "load_config",
    "load_file",
]
