# tokenbound/registry.py
# -*- coding: utf-8 -*-
"""
Account registry: deterministic deployment of token-bound accounts.

The address of an account is a pure function of (implementation,
token_contract, token_id, salt), so anyone can compute where the account
for a token lives before or after it is deployed.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Dict, Optional, Tuple

from tokenbound.account import Account
from tokenbound.account.events import AccountRegistered
from tokenbound.errors import AccountAlreadyDeployed, InvalidImplementationPointer
from tokenbound.host.base import ExecutionHost
from tokenbound.settings import Settings, get_settings
from tokenbound.types import FELT_BOUND, ZERO_ADDRESS, split_u256

logger = logging.getLogger("tokenbound.registry")

# registry events are emitted from this pseudo-address
REGISTRY_ADDRESS = int.from_bytes(b"tokenbound.registry", "big") % FELT_BOUND


class AccountRegistry:
    def __init__(self, host: ExecutionHost, implementation: int, *, settings: Optional[Settings] = None) -> None:
        if not ZERO_ADDRESS < implementation < FELT_BOUND:
            raise InvalidImplementationPointer(implementation=implementation)
        self.host = host
        self.implementation = implementation
        self.settings = settings or get_settings()
        self._accounts: Dict[int, Account] = {}
        self._deployed: Dict[Tuple[int, int], int] = {}

    def account_address(self, token_contract: int, token_id: int, salt: Optional[int] = None) -> int:
        salt = self.settings.registry.default_salt if salt is None else salt
        low, high = split_u256(token_id)
        h = hashlib.sha256()
        for word in (self.implementation, token_contract, low, high, salt):
            h.update(word.to_bytes(32, "big"))
        address = int.from_bytes(h.digest(), "big") % FELT_BOUND
        return address or 1

    def create_account(self, token_contract: int, token_id: int, salt: Optional[int] = None) -> Account:
        address = self.account_address(token_contract, token_id, salt)
        if address in self._accounts or self.host.is_deployed(address):
            raise AccountAlreadyDeployed(address=hex(address))

        # Account() разворачивает себя в хосте по этому адресу
        with self.host.atomic():
            account = Account(self.host, token_contract, token_id, address=address, settings=self.settings)
            self.host.replace_implementation(address, self.implementation)
            self.host.emit(
                REGISTRY_ADDRESS,
                AccountRegistered(account=address, token_contract=token_contract, token_id=token_id),
            )

        self._accounts[address] = account
        key = (token_contract, token_id)
        self._deployed[key] = self._deployed.get(key, 0) + 1
        logger.info("account registered", extra={"account": hex(address), "token_id": token_id})
        return account

    def get_account(self, token_contract: int, token_id: int, salt: Optional[int] = None) -> Optional[Account]:
        return self._accounts.get(self.account_address(token_contract, token_id, salt))

    def total_deployed_accounts(self, token_contract: int, token_id: int) -> int:
        return self._deployed.get((token_contract, token_id), 0)
