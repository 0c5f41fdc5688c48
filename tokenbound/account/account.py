# tokenbound/account/account.py
# -*- coding: utf-8 -*-
"""
Token-bound account.

Control of the account follows ownership of one token: whoever currently
holds (token_contract, token_id) may validate, execute, upgrade and lock.
The owner is re-resolved on every operation, so a token transfer hands over
the account immediately.

The account is a contract deployed into the host: its binding and unlock
timestamp live in host storage (and roll back with it), and its entry points
can be called by other contracts, including another account that holds the
bound token.

Entry points and their gates:

    validate_*          owner == caller               -> AUTHORIZED / InvalidSignature
    execute             only owner, unlocked           -> ordered return data
    upgrade             only owner, unlocked, non-zero -> AccountUpgraded
    lock                only owner, unlocked, u64      -> AccountLocked
    owner/token/is_locked/supports_interface            -> pure queries
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from tokenbound.account import codec, events
from tokenbound.account.executor import CallExecutor
from tokenbound.account.guard import AuthorizationGuard
from tokenbound.account.lock import LockState
from tokenbound.account.resolver import OwnershipResolver
from tokenbound.account.state import AccountState
from tokenbound.errors import InvalidImplementationPointer
from tokenbound.host.base import Contract, Entrypoint, ExecutionHost
from tokenbound.settings import Settings, get_settings
from tokenbound.telemetry.logging import bind_context
from tokenbound.telemetry.metrics import instrumented
from tokenbound.types import (
    FELT_BOUND,
    TBA_INTERFACE_ID,
    ZERO_ADDRESS,
    AssetBinding,
    Call,
    ReturnData,
    join_u256,
    split_u256,
)

logger = logging.getLogger("tokenbound.account")

CallLike = Union[Call, Mapping[str, Any]]


def _expect_words(calldata: List[int], count: int) -> List[int]:
    if len(calldata) != count:
        raise ValueError(f"expected {count} calldata words, got {len(calldata)}")
    return calldata


class Account(Contract):
    def __init__(
        self,
        host: ExecutionHost,
        token_contract: int,
        token_id: int,
        *,
        address: int,
        settings: Optional[Settings] = None,
    ) -> None:
        if not 0 < address < FELT_BOUND:
            raise ValueError(f"invalid account address: {address}")
        settings = settings or get_settings()
        binding = AssetBinding(token_contract=token_contract, token_id=token_id)

        super().__init__()
        self.host = host
        self.address = address
        self.settings = settings
        self.metrics_enabled = settings.metrics.enabled
        self.state = AccountState.initialize(self.storage, binding)
        self.resolver = OwnershipResolver(host, address)
        self.guard = AuthorizationGuard(binding, self.resolver)
        self.lock_state = LockState(
            self.state,
            host.block_timestamp,
            max_duration=settings.lock.max_duration_seconds,
        )
        self.executor = CallExecutor(host, address, metrics_enabled=self.metrics_enabled)

        # развертывание и AccountCreated - одна единица работы
        with host.atomic():
            host.deploy(address, self)
            owner = self.guard.current_owner()
            host.emit(address, events.AccountCreated(owner=owner))
        logger.info(
            "account created",
            extra={"account": hex(address), "token_contract": hex(token_contract), "token_id": token_id, "owner": hex(owner)},
        )

    def __repr__(self) -> str:
        return f"Account(address={hex(self.address)}, token={self.state.binding.as_tuple()})"

    # ---------------------------
    # Validation
    # ---------------------------

    @instrumented("is_valid_signature", level=logging.DEBUG)
    def is_valid_signature(self, hash_: int, signature: Sequence[int]) -> int:
        return self.guard.authorize(self.host.caller_address(), hash_, signature)

    @instrumented("validate_signature", level=logging.DEBUG)
    def validate_signature(self, hash_: int, signature: Sequence[int]) -> int:
        return self.guard.validate(self.host.caller_address(), hash_, signature)

    def _validate_current_tx(self) -> int:
        tx = self.host.tx_info()
        bind_context(tx_hash=tx.transaction_hash)
        return self.guard.validate(self.host.caller_address(), tx.transaction_hash, tx.signature)

    @instrumented("validate_transaction", level=logging.DEBUG)
    def validate_transaction(self, calls: Sequence[CallLike]) -> int:
        return self._validate_current_tx()

    @instrumented("validate_deploy", level=logging.DEBUG)
    def validate_deploy(self, class_hash: int, contract_address_salt: int, token_contract: int, token_id: int) -> int:
        return self._validate_current_tx()

    @instrumented("validate_declare", level=logging.DEBUG)
    def validate_declare(self, class_hash: int) -> int:
        return self._validate_current_tx()

    # ---------------------------
    # Mutating entry points
    # ---------------------------

    @instrumented("execute")
    def execute(self, calls: Sequence[CallLike]) -> List[ReturnData]:
        self.guard.assert_only_owner(self.host.caller_address())
        self.lock_state.assert_unlocked()

        batch = [c if isinstance(c, Call) else Call.model_validate(c) for c in calls]
        tx_hash = self.host.tx_info().transaction_hash
        bind_context(tx_hash=tx_hash)

        responses = self.executor.execute_batch(batch)
        self.host.emit(
            self.address,
            events.TransactionExecuted(tx_hash=tx_hash, responses=tuple(tuple(r) for r in responses)),
        )
        return responses

    @instrumented("upgrade")
    def upgrade(self, new_implementation: int) -> None:
        self.guard.assert_only_owner(self.host.caller_address())
        self.lock_state.assert_unlocked()
        if not isinstance(new_implementation, int) or not ZERO_ADDRESS < new_implementation < FELT_BOUND:
            raise InvalidImplementationPointer(implementation=new_implementation)

        self.host.replace_implementation(self.address, new_implementation)
        self.host.emit(self.address, events.AccountUpgraded(account=self.address, implementation=new_implementation))

    @instrumented("lock")
    def lock(self, duration: int) -> None:
        self.guard.assert_only_owner(self.host.caller_address())
        locked_at = self.host.block_timestamp()
        self.lock_state.lock(duration)
        self.host.emit(self.address, events.AccountLocked(account=self.address, locked_at=locked_at, duration=duration))

    # ---------------------------
    # Queries
    # ---------------------------

    @instrumented("owner", level=logging.DEBUG)
    def owner(self, token_contract: Optional[int] = None, token_id: Optional[int] = None) -> int:
        binding = self.state.binding
        return self.resolver.resolve_owner(
            binding.token_contract if token_contract is None else token_contract,
            binding.token_id if token_id is None else token_id,
        )

    def token(self) -> Tuple[int, int]:
        return self.state.binding.as_tuple()

    def is_locked(self) -> Tuple[bool, int]:
        return self.lock_state.is_locked()

    def supports_interface(self, interface_id: int) -> bool:
        return interface_id == TBA_INTERFACE_ID

    # ---------------------------
    # Contract entry points (calldata in, return data out)
    # ---------------------------

    def entrypoints(self) -> Dict[str, Entrypoint]:
        return {
            "is_valid_signature": self._ep_is_valid_signature,
            "execute": self._ep_execute,
            "owner": self._ep_owner,
            "token": self._ep_token,
            "upgrade": self._ep_upgrade,
            "lock": self._ep_lock,
            "is_locked": self._ep_is_locked,
            "supports_interface": self._ep_supports_interface,
        }

    def _ep_is_valid_signature(self, calldata: List[int]) -> List[int]:
        if not calldata:
            raise ValueError("missing message hash")
        signature, end = codec.decode_array(calldata, 1)
        if end != len(calldata):
            raise ValueError("trailing words after signature")
        return [self.is_valid_signature(calldata[0], signature)]

    def _ep_execute(self, calldata: List[int]) -> List[int]:
        return codec.encode_responses(self.execute(codec.decode_calls(calldata)))

    def _ep_owner(self, calldata: List[int]) -> List[int]:
        # [] - привязанный токен; [contract, low, high] - произвольный
        if not calldata:
            return [self.owner()]
        token_contract, low, high = _expect_words(calldata, 3)
        return [self.owner(token_contract, join_u256(low, high))]

    def _ep_token(self, calldata: List[int]) -> List[int]:
        _expect_words(calldata, 0)
        token_contract, token_id = self.token()
        return [token_contract, *split_u256(token_id)]

    def _ep_upgrade(self, calldata: List[int]) -> List[int]:
        self.upgrade(_expect_words(calldata, 1)[0])
        return []

    def _ep_lock(self, calldata: List[int]) -> List[int]:
        self.lock(_expect_words(calldata, 1)[0])
        return []

    def _ep_is_locked(self, calldata: List[int]) -> List[int]:
        _expect_words(calldata, 0)
        locked, remaining = self.is_locked()
        return [int(locked), remaining]

    def _ep_supports_interface(self, calldata: List[int]) -> List[int]:
        return [int(self.supports_interface(_expect_words(calldata, 1)[0]))]
