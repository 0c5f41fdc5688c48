# tests/conftest.py
from __future__ import annotations

from typing import Dict, List

import pytest

from tokenbound.account import Account
from tokenbound.host.memory import AssetContract, Contract, ContractRevert, InMemoryHost
from tokenbound.settings import AppMeta, Settings
from tokenbound.utils.time import FrozenClock

# ---------- Константы ----------

T0 = 1_700_000_000
ASSET = 0xA55E7
ALICE = 0xA11CE
BOB = 0xB0B
ACCOUNT = 0xACC0
TOKEN_ID = 1


class Journal(Contract):
    """Test target: appends calldata to storage, can revert, reports its caller."""

    def __init__(self) -> None:
        super().__init__()
        self.storage["entries"] = []

    def entrypoints(self) -> Dict[str, object]:
        return {
            "append": self._append,
            "whoami": self._whoami,
            "revert": self._revert,
        }

    @property
    def entries(self) -> List[int]:
        return self.storage["entries"]

    def _append(self, calldata: List[int]) -> List[int]:
        self.storage["entries"].extend(calldata)
        return [len(self.storage["entries"])]

    def _whoami(self, calldata: List[int]) -> List[int]:
        return [self.caller()]

    def _revert(self, calldata: List[int]) -> List[int]:
        raise ContractRevert("journal: forced revert")


# ---------- Фикстуры ----------

@pytest.fixture
def settings() -> Settings:
    return Settings(meta=AppMeta(environment="test"))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def host(clock: FrozenClock) -> InMemoryHost:
    return InMemoryHost(clock)


@pytest.fixture
def asset(host: InMemoryHost) -> AssetContract:
    contract = host.deploy(ASSET, AssetContract())
    contract.mint(ALICE, TOKEN_ID)
    return contract


@pytest.fixture
def journal(host: InMemoryHost) -> Journal:
    return host.deploy(0x10A1, Journal())


@pytest.fixture
def account(host: InMemoryHost, asset: AssetContract, settings: Settings) -> Account:
    return Account(host, ASSET, TOKEN_ID, address=ACCOUNT, settings=settings)
