# tests/unit/test_executor.py
from __future__ import annotations

import pytest

from tests.conftest import ACCOUNT
from tokenbound.account.executor import CallExecutor
from tokenbound.errors import MulticallFailed
from tokenbound.types import Call


@pytest.fixture
def executor(host) -> CallExecutor:
    return CallExecutor(host, ACCOUNT)


def test_batch_returns_one_entry_per_call_in_order(executor, journal):
    calls = [Call(to=journal.address, selector="append", calldata=[i, i * 10]) for i in range(1, 5)]
    responses = executor.execute_batch(calls)
    assert responses == [[2], [4], [6], [8]]
    assert journal.entries == [1, 10, 2, 20, 3, 30, 4, 40]


def test_empty_batch(executor):
    assert executor.execute_batch([]) == []


def test_callee_sees_the_account_as_caller(executor, journal):
    assert executor.execute_batch([Call(to=journal.address, selector="whoami")]) == [[ACCOUNT]]


@pytest.mark.parametrize("failing_index", [0, 1, 3])
def test_failing_call_aborts_whole_batch(executor, host, journal, failing_index):
    calls = [Call(to=journal.address, selector="append", calldata=[i]) for i in range(4)]
    calls[failing_index] = Call(to=journal.address, selector="revert")
    host.emit(ACCOUNT, "marker")
    events_before = list(host.events)

    with pytest.raises(MulticallFailed) as ei:
        executor.execute_batch(calls)

    assert ei.value.index == failing_index
    assert "forced revert" in ei.value.reason
    # ни одного частичного эффекта
    assert journal.entries == []
    assert host.events == events_before


def test_unknown_target_and_entrypoint(executor, journal):
    with pytest.raises(MulticallFailed) as ei:
        executor.execute_batch([Call(to=0xDEAD, selector="append")])
    assert ei.value.reason == "CONTRACT_NOT_DEPLOYED"

    with pytest.raises(MulticallFailed) as ei:
        executor.execute_batch([
            Call(to=journal.address, selector="append", calldata=[1]),
            Call(to=journal.address, selector="missing"),
        ])
    assert ei.value.index == 1
    assert ei.value.reason == "ENTRYPOINT_NOT_FOUND"
    assert journal.entries == []


def test_call_model_rejects_non_felt_calldata():
    with pytest.raises(ValueError):
        Call(to=1, selector="append", calldata=[2**251])
    with pytest.raises(ValueError):
        Call(to=1, selector="", calldata=[])


def test_any_callee_exception_becomes_multicall_failure(executor, asset, journal):
    calls = [
        Call(to=journal.address, selector="append", calldata=[1]),
        Call(to=asset.address, selector="ownerOf", calldata=[2**128, 0]),
    ]
    with pytest.raises(MulticallFailed) as ei:
        executor.execute_batch(calls)
    assert ei.value.index == 1
    assert "128 bits" in ei.value.reason
    assert journal.entries == []
