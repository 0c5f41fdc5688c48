# tokenbound/host/base.py
# -*- coding: utf-8 -*-
"""
Boundary to the ledger/execution host.

The host owns call dispatch, transaction info, block time, the event log,
implementation pointers and the atomicity of a unit of work. Durable state
of every deployed contract (accounts included) lives in ``Contract.storage``
so the host can snapshot and restore it. The account never reaches past
this module.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, ContextManager, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from tokenbound.types import ZERO_ADDRESS, TxInfo

Entrypoint = Callable[[List[int]], Optional[Sequence[int]]]


class Contract:
    """
    Base class for anything deployed into a host. ``storage`` is the only
    state the host rolls back; it is restored in place, so views holding a
    reference to it stay valid.
    """

    def __init__(self) -> None:
        self.storage: Dict[str, Any] = {}
        self.address: int = ZERO_ADDRESS
        self.host: Optional["ExecutionHost"] = None

    def entrypoints(self) -> Dict[str, Entrypoint]:
        raise NotImplementedError

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self.storage)

    def restore(self, state: Dict[str, Any]) -> None:
        self.storage.clear()
        self.storage.update(state)

    def caller(self) -> int:
        assert self.host is not None, "contract is not deployed"
        return self.host.caller_address()


@runtime_checkable
class ExecutionHost(Protocol):
    def caller_address(self) -> int:
        """Address that invoked the current entry point."""

    def block_timestamp(self) -> int:
        """Current host time, u64 seconds."""

    def tx_info(self) -> TxInfo:
        """Hash and signature of the transaction being executed."""

    def deploy(self, address: int, contract: Contract) -> Contract:
        """Bind ``contract`` to ``address``; raises ValueError if the address is taken."""

    def is_deployed(self, address: int) -> bool:
        """Whether a contract lives at ``address``."""

    def call_contract(self, sender: int, target: int, selector: str, calldata: Sequence[int]) -> List[int]:
        """
        Synchronously dispatch ``selector`` on ``target`` with ``sender`` as the
        callee's caller. Raises ``tokenbound.errors.CallFailed`` on failure.
        """

    def atomic(self) -> ContextManager[None]:
        """Unit of work: every state change made inside is discarded on exception."""

    def emit(self, emitter: int, event: Any) -> None:
        """Append an event to the host's log."""

    def replace_implementation(self, account: int, implementation: int) -> None:
        """Point ``account`` at a new implementation."""
