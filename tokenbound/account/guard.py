# tokenbound/account/guard.py
# -*- coding: utf-8 -*-
"""
Authorization guard.

There is exactly one predicate: the caller is the current owner of the
bound token. The validation path accepts a (hash, signature) pair and
checks the signature's shape, but the decision itself is caller equality;
the signature words are never verified against the hash.
"""

from __future__ import annotations

import logging
from typing import Sequence

from tokenbound.account.resolver import OwnershipResolver
from tokenbound.errors import InvalidSignature, InvalidSignatureLength, Unauthorized
from tokenbound.types import AUTHORIZED, REJECTED, SIGNATURE_LENGTH, AssetBinding

logger = logging.getLogger("tokenbound.account.guard")


class AuthorizationGuard:
    def __init__(self, binding: AssetBinding, resolver: OwnershipResolver) -> None:
        self.binding = binding
        self.resolver = resolver

    def current_owner(self) -> int:
        return self.resolver.resolve_owner(*self.binding.as_tuple())

    def authorize(self, caller: int, hash_: int, signature: Sequence[int]) -> int:
        """Return AUTHORIZED or REJECTED; raise only on a malformed signature."""
        if len(signature) != SIGNATURE_LENGTH:
            raise InvalidSignatureLength(expected=SIGNATURE_LENGTH, actual=len(signature))
        # TODO: verify (r, s) over hash_ against the owner's public key once the
        # token contract exposes one; ownership is the only factor today.
        logger.debug("signature for %s accepted by shape only", hex(hash_))
        return AUTHORIZED if caller == self.current_owner() else REJECTED

    def validate(self, caller: int, hash_: int, signature: Sequence[int]) -> int:
        if self.authorize(caller, hash_, signature) != AUTHORIZED:
            raise InvalidSignature(caller=hex(caller), hash=hex(hash_))
        return AUTHORIZED

    def assert_only_owner(self, caller: int) -> None:
        owner = self.current_owner()
        if caller != owner:
            raise Unauthorized(caller=hex(caller), owner=hex(owner))
