from __future__ import annotations

"""
token_ledger.cli.ledger_cli
---------------------------

Inspect ledger configuration and replay operation scenarios against a fresh
ledger.

Scenario files are JSON or YAML:

    token:                 # optional metadata overrides
      symbol: DEMO
    accounts:              # aliases; a list derives deterministic addresses
      alice: "0x1111111111111111111111111111111111111111"
      bob: null
    steps:
      - {op: mint, account: alice, amount: 1000}
      - {op: approve, caller: alice, spender: bob, amount: max}
      - {op: transfer_from, caller: bob, owner: alice, to: bob, amount: 10}

Address fields accept an alias, ``zero`` (ZERO_ADDRESS) or a 0x-hex literal.
YAML reads an unquoted 0x literal as an integer; integers below 2**160 are
taken as the big-endian address value.
Amounts accept ints, decimal/hex strings and ``max``.

Examples
--------
# Show effective metadata/config
token-ledger info --json

# Replay a scenario, exit 1 if any step reverted
token-ledger replay scenario.yaml --fail-on-revert
"""

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import typer

from .. import logging as tlog
from ..config import LedgerConfig, load_config, load_file
from ..errors import ConfigError
from ..ledger import Ledger
from ..types.address import ADDRESS_LEN, ZERO_ADDRESS, Address
from ..types.result import Receipt
from ..u256 import parse_amount
from ..version import __version__

app = typer.Typer(
    name="token-ledger",
    add_completion=False,
    no_args_is_help=True,
    help="Inspect and replay operations on an ERC20-style token ledger.",
)

_log = tlog.get_logger(__name__)

# op -> (address fields, in call order)
_OP_FIELDS: Dict[str, Tuple[str, ...]] = {
    "mint": ("account",),
    "burn": ("account",),
    "transfer": ("caller", "to"),
    "transfer_from": ("caller", "owner", "to"),
    "approve": ("caller", "spender"),
}

_TOKEN_KEYS = ("name", "symbol", "decimals")


class ScenarioError(ValueError):
    """The scenario file is malformed."""


@dataclass(frozen=True)
class Step:
    op: str
    addresses: Tuple[Address, ...]
    amount: int


@dataclass(frozen=True)
class Scenario:
    accounts: Dict[str, Address]
    steps: List[Step]
    token: Dict[str, Any]


# -------------------- scenario parsing --------------------


def derive_address(alias: str) -> Address:
    """Deterministic address for an alias (last 20 bytes of sha3-256)."""
    return Address(hashlib.sha3_256(alias.encode("utf-8")).digest()[-ADDRESS_LEN:])


def _address_value(value: Any) -> Address:
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value < 1 << (8 * ADDRESS_LEN):
            raise ValueError(f"integer address out of range: {value:#x}")
        return Address(value.to_bytes(ADDRESS_LEN, "big"))
    return Address.coerce(value)


def _parse_accounts(raw: Any) -> Dict[str, Address]:
    if raw is None:
        return {}
    if isinstance(raw, list):
        raw = {str(a): None for a in raw}
    if not isinstance(raw, dict):
        raise ScenarioError("accounts must be a list of aliases or a mapping alias -> address")
    out: Dict[str, Address] = {}
    for alias, value in raw.items():
        alias = str(alias)
        if alias == "zero":
            raise ScenarioError("'zero' is reserved and cannot be used as an alias")
        try:
            out[alias] = derive_address(alias) if value is None else _address_value(value)
        except (TypeError, ValueError) as e:
            raise ScenarioError(f"account {alias!r}: {e}") from e
    return out


def _resolve(ref: Any, accounts: Mapping[str, Address], *, where: str) -> Address:
    if isinstance(ref, str):
        if ref in accounts:
            return accounts[ref]
        if ref == "zero":
            return ZERO_ADDRESS
    try:
        return _address_value(ref)
    except (TypeError, ValueError) as e:
        raise ScenarioError(f"{where}: unknown account {ref!r}") from e


def _parse_step(i: int, raw: Any, accounts: Mapping[str, Address]) -> Step:
    where = f"steps[{i}]"
    if not isinstance(raw, dict):
        raise ScenarioError(f"{where}: expected a mapping")
    op = str(raw.get("op", ""))
    fields = _OP_FIELDS.get(op)
    if fields is None:
        raise ScenarioError(f"{where}: unknown op {op!r} (expected one of {', '.join(_OP_FIELDS)})")
    missing = [f for f in fields + ("amount",) if f not in raw]
    if missing:
        raise ScenarioError(f"{where}: {op} is missing {', '.join(missing)}")
    addrs = tuple(_resolve(raw[f], accounts, where=f"{where}.{f}") for f in fields)
    try:
        amount = parse_amount(raw["amount"])
    except (TypeError, ValueError) as e:
        raise ScenarioError(f"{where}.amount: {e}") from e
    return Step(op=op, addresses=addrs, amount=amount)


def parse_scenario(data: Mapping[str, Any]) -> Scenario:
    accounts = _parse_accounts(data.get("accounts"))
    steps_raw = data.get("steps")
    if not isinstance(steps_raw, list):
        raise ScenarioError("steps must be a list")
    token = data.get("token") or {}
    if not isinstance(token, dict) or set(token) - set(_TOKEN_KEYS):
        raise ScenarioError(f"token may only set {', '.join(_TOKEN_KEYS)}")
    steps = [_parse_step(i, s, accounts) for i, s in enumerate(steps_raw)]
    return Scenario(accounts=accounts, steps=steps, token=dict(token))


def load_scenario(path: Path) -> Scenario:
    try:
        data = load_file(path)
    except ConfigError as e:
        raise ScenarioError(str(e)) from e
    return parse_scenario(data)


# -------------------- execution --------------------


def run_step(ledger: Ledger, step: Step) -> Receipt:
    method = getattr(ledger, step.op)
    return method(*step.addresses, step.amount)


def _label(addr: Address, names: Mapping[Address, str]) -> str:
    if addr.is_zero:
        return "zero"
    return names.get(addr, addr.to_hex())


def _fmt_receipt(i: int, rc: Receipt, names: Mapping[Address, str]) -> str:
    head = f"[{i}] {rc.operation:<13} {str(rc.status).upper():<7}"
    if rc.error is not None:
        args = ", ".join(
            f"{k}={_label(v, names) if isinstance(v, Address) else v}"
            for k, v in zip(rc.error.to_dict()["args"], rc.error.args)
        )
        return f"{head} {rc.error.code}({args})"
    evs = []
    for ev in rc.events:
        a, b, value = ev.args
        evs.append(f"{ev.name}({_label(a, names)} -> {_label(b, names)}, {value})")
    return f"{head} {'; '.join(evs)}"


def _load_cfg(config: Optional[Path]) -> LedgerConfig:
    try:
        return load_config(config_file=config)
    except ConfigError as e:
        typer.secho(f"config error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)


# -------------------- commands --------------------


@app.command("info")
def info(
    config: Optional[Path] = typer.Option(None, "--config", help="JSON/YAML config file."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Print token metadata and the effective configuration."""
    cfg = _load_cfg(config)
    payload = {"version": __version__, **cfg.as_dict()}
    if json_out:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return
    for k in sorted(payload):
        typer.echo(f"{k:<17} {payload[k]}")


@app.command("replay")
def replay(
    scenario: Path = typer.Argument(..., help="Scenario file (.json, .yaml, .yml)."),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON/YAML config file."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
    fail_on_revert: bool = typer.Option(
        False, "--fail-on-revert", help="Exit with status 1 if any step reverted."
    ),
) -> None:
    """Apply a scenario's steps to a fresh ledger and print every receipt."""
    cfg = _load_cfg(config)
    try:
        sc = load_scenario(scenario)
        cfg = cfg.with_overrides(**sc.token)
    except (ScenarioError, ConfigError) as e:
        typer.secho(f"invalid scenario: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)

    tlog.configure_from_config(cfg)
    ledger = Ledger.from_config(cfg)
    names = {addr: alias for alias, addr in sc.accounts.items()}
    receipts: List[Receipt] = []
    try:
        with tlog.trace_scope():
            for i, step in enumerate(sc.steps):
                receipts.append(run_step(ledger, step))
        snap = ledger.snapshot()
    finally:
        ledger.close()

    reverted = sum(1 for rc in receipts if not rc.is_success)
    _log.info("replay finished", extra={"steps": len(receipts), "reverted": reverted})

    if json_out:
        typer.echo(
            json.dumps(
                {
                    "token": {"name": ledger.name(), "symbol": ledger.symbol(), "decimals": ledger.decimals()},
                    "receipts": [rc.to_dict() for rc in receipts],
                    "balances": {_label(a, names): v for a, v in sorted(snap.balances.items())},
                    "total_supply": snap.total_supply,
                    "state_root": snap.root(),
                },
                indent=2,
            )
        )
    else:
        for i, rc in enumerate(receipts):
            typer.echo(_fmt_receipt(i, rc, names))
        typer.secho("balances", bold=True)
        for a, v in sorted(snap.balances.items()):
            typer.echo(f"  {_label(a, names):<42} {v}")
        typer.echo(f"total_supply {snap.total_supply}")

    if fail_on_revert and reverted:
        raise typer.Exit(1)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
