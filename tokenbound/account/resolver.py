# tokenbound/account/resolver.py
# -*- coding: utf-8 -*-
"""
Owner resolution against the bound token contract.

The token contract may expose its owner query under either naming
convention, so resolution is a two-attempt dispatch: camelCase first,
snake_case on failure. Nothing is cached; every resolution reflects the
token's current holder.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from tokenbound.errors import CallFailed, ResolutionError
from tokenbound.host.base import ExecutionHost
from tokenbound.types import ZERO_ADDRESS, is_felt, split_u256

logger = logging.getLogger("tokenbound.account.resolver")

OWNER_OF_SELECTORS = ("ownerOf", "owner_of")


class OwnershipResolver:
    def __init__(self, host: ExecutionHost, sender: int, selectors: Sequence[str] = OWNER_OF_SELECTORS) -> None:
        self.host = host
        # address the queries are issued from (the account itself)
        self.sender = sender
        self.selectors = tuple(selectors)

    def resolve_owner(self, token_contract: int, token_id: int) -> int:
        try:
            calldata = list(split_u256(token_id))
        except ValueError as e:
            raise ResolutionError(str(e), token_contract=hex(token_contract)) from e

        failures: List[str] = []
        for selector in self.selectors:
            try:
                response = self.host.call_contract(self.sender, token_contract, selector, calldata)
            except CallFailed as e:
                logger.debug("owner query %s failed: %s", selector, e.reason)
                failures.append(f"{selector}: {e.reason}")
                continue
            return self._decode(response, token_contract, selector)

        raise ResolutionError(
            "token contract answered neither owner query",
            token_contract=hex(token_contract),
            token_id=token_id,
            failures=failures,
        )

    @staticmethod
    def _decode(response: Sequence[int], token_contract: int, selector: str) -> int:
        if len(response) != 1 or not is_felt(response[0]):
            raise ResolutionError(
                "owner query returned undecodable data",
                token_contract=hex(token_contract),
                selector=selector,
                response_len=len(response),
            )
        if response[0] == ZERO_ADDRESS:
            # сожжённый токен: владельца нет, а 0 - это и "нет вызывающего"
            raise ResolutionError("bound token has no owner", token_contract=hex(token_contract), selector=selector)
        return response[0]
