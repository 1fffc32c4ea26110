from __future__ import annotations

import io
import json
import logging

import pytest

from token_ledger import LedgerConfig
from token_ledger import logging as tlog
from tests import det_address


@pytest.fixture(autouse=True)
def _reset_logging():
    tlog.clear_context()
    yield
    tlog.clear_context()
    logger = logging.getLogger("token_ledger")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


def test_json_format_includes_context_and_extras():
    buf = io.StringIO()
    tlog.configure(json=True, level="DEBUG", stream=buf)
    log = tlog.get_logger("token_ledger.test")
    with tlog.trace_scope("abc123"):
        tlog.bind(caller=det_address("alice"))
        log.info("hello", extra={"amount": 2**255})
    payload = json.loads(buf.getvalue().strip())
    assert payload["msg"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["trace_id"] == "abc123"
    assert payload["caller"] == det_address("alice").to_hex()
    assert payload["amount"] == 2**255


def test_trace_scope_restores_context():
    tlog.bind(ledger="TKN")
    with tlog.trace_scope():
        assert "trace_id" in tlog.context()
    assert tlog.context() == {"ledger": "TKN"}
    tlog.unbind("ledger")
    assert tlog.context() == {}


def test_text_format_is_one_line():
    buf = io.StringIO()
    tlog.configure(json=False, level="INFO", stream=buf)
    tlog.get_logger("token_ledger.test").info("plain", extra={"code": "X"})
    line = buf.getvalue().strip()
    assert "\n" not in line
    assert "| INFO  |" in line
    assert "code=X" in line
    assert line.endswith("plain")


def test_level_filters():
    buf = io.StringIO()
    tlog.configure(json=True, level="WARNING", stream=buf)
    tlog.get_logger("token_ledger.test").info("quiet")
    assert buf.getvalue() == ""


def test_env_forces_format(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_LOG_FORMAT", "json")
    buf = io.StringIO()
    tlog.configure_from_config(LedgerConfig(log_format="text"), stream=buf)
    tlog.get_logger("token_ledger.test").warning("as json")
    assert json.loads(buf.getvalue())["ledger"] == "TKN"
