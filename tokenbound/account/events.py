# tokenbound/account/events.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AccountCreated:
    owner: int


@dataclass(frozen=True)
class TransactionExecuted:
    tx_hash: int
    responses: Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class AccountUpgraded:
    account: int
    implementation: int


@dataclass(frozen=True)
class AccountLocked:
    account: int
    locked_at: int
    duration: int


@dataclass(frozen=True)
class AccountRegistered:
    account: int
    token_contract: int
    token_id: int
