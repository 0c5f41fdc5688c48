# tokenbound/host/memory.py
# -*- coding: utf-8 -*-
"""
Deterministic in-memory execution host.

Used by the test-suite and the CLI simulation. It provides everything the
account expects from a ledger host:

- contract deployment at fixed addresses and synchronous dispatch by
  entry-point name, with caller-stack semantics;
- ``invoke(caller)``: one serialized transaction with a fresh hash;
- ``atomic()``: nested snapshot/rollback of contract storage (accounts
  included), event log and implementation pointers;
- an append-only event log.
"""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Type

from tokenbound.errors import AccountError, CallFailed
from tokenbound.host.base import Contract, Entrypoint
from tokenbound.types import FELT_BOUND, TxInfo, ZERO_ADDRESS, join_u256
from tokenbound.utils.time import Clock, FrozenClock

logger = logging.getLogger("tokenbound.host")


class ContractRevert(Exception):
    """Raised inside a contract entry point to abort the call."""


@dataclass(frozen=True)
class EmittedEvent:
    emitter: int
    event: Any
    block_timestamp: int


# -----------------------------------------------------------------------------
# Contracts
# -----------------------------------------------------------------------------

class AssetContract(Contract):
    """
    ERC-721-like asset. The owner query is exposed under the naming
    conventions listed in ``conventions`` ("camel" -> ownerOf,
    "snake" -> owner_of); an empty tuple exposes neither.
    """

    CAMEL = "camel"
    SNAKE = "snake"

    def __init__(
        self,
        conventions: Iterable[str] = (CAMEL, SNAKE),
        *,
        malformed_owner_response: bool = False,
    ) -> None:
        super().__init__()
        self.conventions = frozenset(conventions)
        unknown = self.conventions - {self.CAMEL, self.SNAKE}
        if unknown:
            raise ValueError(f"unknown naming conventions: {sorted(unknown)}")
        self.malformed_owner_response = malformed_owner_response
        self.storage["owners"] = {}

    def entrypoints(self) -> Dict[str, Entrypoint]:
        eps: Dict[str, Entrypoint] = {}
        if self.CAMEL in self.conventions:
            eps["ownerOf"] = self._owner_of
            eps["transferFrom"] = self._transfer_from
        if self.SNAKE in self.conventions:
            eps["owner_of"] = self._owner_of
            eps["transfer_from"] = self._transfer_from
        return eps

    # direct helpers for simulations; bypass dispatch
    def mint(self, to: int, token_id: int) -> None:
        owners = self.storage["owners"]
        if token_id in owners:
            raise ContractRevert("ERC721: token already minted")
        if to == ZERO_ADDRESS:
            raise ContractRevert("ERC721: mint to zero address")
        owners[token_id] = to

    def transfer(self, token_id: int, to: int) -> None:
        if token_id not in self.storage["owners"]:
            raise ContractRevert("ERC721: invalid token ID")
        self.storage["owners"][token_id] = to

    def owner_of(self, token_id: int) -> int:
        try:
            return self.storage["owners"][token_id]
        except KeyError:
            raise ContractRevert("ERC721: invalid token ID") from None

    # entry points
    def _owner_of(self, calldata: List[int]) -> List[int]:
        if len(calldata) != 2:
            raise ContractRevert("ERC721: bad calldata")
        owner = self.owner_of(join_u256(calldata[0], calldata[1]))
        if self.malformed_owner_response:
            return [owner, 0]
        return [owner]

    def _transfer_from(self, calldata: List[int]) -> List[int]:
        if len(calldata) != 4:
            raise ContractRevert("ERC721: bad calldata")
        src, dst, low, high = calldata
        token_id = join_u256(low, high)
        owner = self.owner_of(token_id)
        if owner != src or self.caller() != owner:
            raise ContractRevert("ERC721: caller is not token owner")
        if dst == ZERO_ADDRESS:
            raise ContractRevert("ERC721: transfer to zero address")
        self.storage["owners"][token_id] = dst
        return []


# -----------------------------------------------------------------------------
# Host
# -----------------------------------------------------------------------------

class InMemoryHost:
    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or FrozenClock()
        self.contracts: Dict[int, Contract] = {}
        self.implementations: Dict[int, int] = {}
        self.events: List[EmittedEvent] = []
        self._callers: List[int] = []
        self._tx: Optional[TxInfo] = None
        self._nonce = 0

    # ---- deployment ----

    def deploy(self, address: int, contract: Contract) -> Contract:
        if not 0 < address < FELT_BOUND:
            raise ValueError(f"invalid contract address: {address}")
        if address in self.contracts:
            raise ValueError(f"address already in use: {hex(address)}")
        contract.address = address
        contract.host = self
        self.contracts[address] = contract
        logger.debug("contract deployed", extra={"address": hex(address), "kind": type(contract).__name__})
        return contract

    def is_deployed(self, address: int) -> bool:
        return address in self.contracts

    # ---- transaction context ----

    @contextmanager
    def invoke(self, caller: int, *, signature: Sequence[int] = (0, 0)) -> Iterator[TxInfo]:
        """Run one serialized transaction on behalf of ``caller``."""
        if self._tx is not None:
            raise RuntimeError("a transaction is already in progress")
        self._nonce += 1
        self._tx = TxInfo(
            transaction_hash=self._tx_hash(caller),
            signature=tuple(signature),
            account_address=caller,
        )
        self._callers.append(caller)
        try:
            with self.atomic():
                yield self._tx
        finally:
            self._callers.pop()
            self._tx = None

    def _tx_hash(self, caller: int) -> int:
        seed = f"{self._nonce}:{caller}:{self.clock.timestamp()}".encode()
        return int.from_bytes(hashlib.sha256(seed).digest(), "big") % FELT_BOUND

    # ---- ExecutionHost ----

    def caller_address(self) -> int:
        return self._callers[-1] if self._callers else ZERO_ADDRESS

    def block_timestamp(self) -> int:
        return self.clock.timestamp()

    def tx_info(self) -> TxInfo:
        if self._tx is None:
            raise RuntimeError("no transaction in progress")
        return self._tx

    def call_contract(self, sender: int, target: int, selector: str, calldata: Sequence[int]) -> List[int]:
        contract = self.contracts.get(target)
        if contract is None:
            raise CallFailed(target, selector, "CONTRACT_NOT_DEPLOYED")
        entrypoint = contract.entrypoints().get(selector)
        if entrypoint is None:
            raise CallFailed(target, selector, "ENTRYPOINT_NOT_FOUND")
        self._callers.append(sender)
        try:
            result = entrypoint(list(calldata))
        except CallFailed as e:
            raise CallFailed(target, selector, e.reason) from e
        except AccountError as e:
            raise CallFailed(target, selector, e.code) from e
        except Exception as e:
            # любая ошибка вызываемого контракта - это отказ вызова
            raise CallFailed(target, selector, str(e) or type(e).__name__) from e
        finally:
            self._callers.pop()
        return list(result or [])

    @contextmanager
    def atomic(self) -> Iterator[None]:
        state = self._snapshot()
        try:
            yield
        except BaseException:
            self._restore(state)
            raise

    def emit(self, emitter: int, event: Any) -> None:
        self.events.append(EmittedEvent(emitter, event, self.clock.timestamp()))

    def replace_implementation(self, account: int, implementation: int) -> None:
        self.implementations[account] = implementation

    # ---- queries ----

    def events_of(self, emitter: int, kind: Optional[Type[Any]] = None) -> List[Any]:
        return [
            e.event for e in self.events
            if e.emitter == emitter and (kind is None or isinstance(e.event, kind))
        ]

    # ---- snapshots ----

    def _snapshot(self) -> Tuple[Dict[int, Any], int, Dict[int, int]]:
        return (
            {addr: c.snapshot() for addr, c in self.contracts.items()},
            len(self.events),
            dict(self.implementations),
        )

    def _restore(self, state: Tuple[Dict[int, Any], int, Dict[int, int]]) -> None:
        storages, n_events, implementations = state
        for addr in list(self.contracts):
            if addr in storages:
                self.contracts[addr].restore(storages[addr])
            else:
                del self.contracts[addr]
        del self.events[n_events:]
        self.implementations = implementations
