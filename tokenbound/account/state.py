# tokenbound/account/state.py
from __future__ import annotations

from typing import Any, MutableMapping

from tokenbound.types import U64_MAX, AssetBinding

TOKEN_CONTRACT = "token_contract"
TOKEN_ID = "token_id"
UNLOCK_TIMESTAMP = "unlock_timestamp"


class AccountState:
    """
    Durable account storage: the token binding and the unlock timestamp.

    A view over the account's host-managed storage mapping, so the host's
    rollback covers it. The binding is written once; the timestamp only
    ever grows.
    """

    __slots__ = ("_storage",)

    def __init__(self, storage: MutableMapping[str, Any]) -> None:
        self._storage = storage

    @classmethod
    def initialize(cls, storage: MutableMapping[str, Any], binding: AssetBinding) -> "AccountState":
        if TOKEN_CONTRACT in storage:
            raise ValueError("account storage is already initialized")
        storage[TOKEN_CONTRACT] = binding.token_contract
        storage[TOKEN_ID] = binding.token_id
        storage[UNLOCK_TIMESTAMP] = 0
        return cls(storage)

    @property
    def binding(self) -> AssetBinding:
        return AssetBinding(token_contract=self._storage[TOKEN_CONTRACT], token_id=self._storage[TOKEN_ID])

    @property
    def unlock_timestamp(self) -> int:
        return self._storage[UNLOCK_TIMESTAMP]

    def set_unlock_timestamp(self, value: int) -> None:
        if not 0 <= value <= U64_MAX:
            raise ValueError(f"unlock timestamp out of u64 range: {value}")
        if value < self.unlock_timestamp:
            raise ValueError("unlock timestamp cannot decrease")
        self._storage[UNLOCK_TIMESTAMP] = value
