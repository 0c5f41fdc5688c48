# tests/unit/test_telemetry.py
from __future__ import annotations

import json
import logging

import pytest
from prometheus_client import REGISTRY

from tests.conftest import ACCOUNT, ALICE, ASSET, BOB, TOKEN_ID
from tokenbound.account import Account
from tokenbound.errors import Unauthorized
from tokenbound.settings import AppMeta, MetricsConfig, Settings
from tokenbound.telemetry import metrics
from tokenbound.telemetry.logging import JsonFormatter, cv_operation, log_context


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("tokenbound.test", logging.INFO, __file__, 1, msg, None, None)


def test_json_formatter_includes_bound_context():
    with log_context(account=ACCOUNT, caller=ALICE, operation="execute"):
        line = JsonFormatter(static_fields={"region": "eu"}).format(_record())
    data = json.loads(line)
    assert data["msg"] == "hello"
    assert data["account"] == hex(ACCOUNT)
    assert data["caller"] == hex(ALICE)
    assert data["operation"] == "execute"
    assert data["region"] == "eu"


def test_log_context_restores_previous_values():
    with log_context(operation="outer"):
        with log_context(operation="inner"):
            assert cv_operation.get() == "inner"
        assert cv_operation.get() == "outer"
    assert cv_operation.get() == "-"


def _count(operation: str, outcome: str) -> float:
    return REGISTRY.get_sample_value(
        "tokenbound_operations_total", {"operation": operation, "outcome": outcome}
    ) or 0.0


@pytest.fixture
def metered_account(host, asset) -> Account:
    settings = Settings(meta=AppMeta(environment="dev"), metrics=MetricsConfig(enabled=True))
    return Account(host, ASSET, TOKEN_ID, address=ACCOUNT, settings=settings)


def test_rejections_are_counted_and_logged(host, metered_account, caplog):
    metrics.configure(enabled=True)
    before = _count("lock", Unauthorized.code)
    with caplog.at_level(logging.WARNING, logger="tokenbound.account"):
        with pytest.raises(Unauthorized):
            with host.invoke(BOB):
                metered_account.lock(10)
    after = _count("lock", Unauthorized.code)
    assert after == before + 1
    assert any("lock rejected" in r.getMessage() for r in caplog.records)


def test_account_settings_can_switch_metrics_off(host, account, settings):
    assert settings.metrics.enabled is False
    metrics.configure(enabled=True)
    before = _count("lock", "ok")
    with host.invoke(ALICE):
        account.lock(10)
    assert _count("lock", "ok") == before
