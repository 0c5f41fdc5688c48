# tokenbound/types.py
# -*- coding: utf-8 -*-
"""
Core value types shared by the account components.

Addresses, contract references and calldata words are plain ints (field
elements). A 256-bit token id travels on the wire as two 128-bit words
(low, high).
"""

from __future__ import annotations

import hashlib
from functools import reduce
from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# -----------------------------------------------------------------------------
# Bounds
# -----------------------------------------------------------------------------

FELT_BOUND = 2**251
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1

ZERO_ADDRESS = 0

# 'VALID' as a short string
AUTHORIZED = int.from_bytes(b"VALID", "big")
REJECTED = 0

SIGNATURE_LENGTH = 2

_SELECTOR_MASK = 2**250 - 1


def is_felt(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < FELT_BOUND


def split_u256(value: int) -> Tuple[int, int]:
    """Split a u256 into (low, high) 128-bit words."""
    if not 0 <= value <= U256_MAX:
        raise ValueError(f"value out of u256 range: {value}")
    return value & U128_MAX, value >> 128


def join_u256(low: int, high: int) -> int:
    if not (0 <= low <= U128_MAX and 0 <= high <= U128_MAX):
        raise ValueError("u256 words must each fit in 128 bits")
    return (high << 128) | low


def encode_short_string(text: str) -> int:
    """ASCII string of at most 31 characters packed big-endian into one felt."""
    raw = text.encode("ascii")
    if not 0 < len(raw) <= 31:
        raise ValueError(f"short string must be 1..31 ASCII characters: {text!r}")
    return int.from_bytes(raw, "big")


def decode_short_string(word: int) -> str:
    if not is_felt(word) or word == 0:
        raise ValueError(f"not a short string: {word!r}")
    return word.to_bytes((word.bit_length() + 7) // 8, "big").decode("ascii")


def selector_from_name(name: str) -> int:
    """Entry-point selector: SHA3-256 of the name truncated to 250 bits."""
    digest = hashlib.sha3_256(name.encode("ascii")).digest()
    return int.from_bytes(digest, "big") & _SELECTOR_MASK


def interface_id(names: Iterable[str]) -> int:
    return reduce(lambda acc, n: acc ^ selector_from_name(n), names, 0)


ACCOUNT_ENTRYPOINTS: Tuple[str, ...] = (
    "is_valid_signature",
    "execute",
    "owner",
    "token",
    "upgrade",
    "lock",
    "is_locked",
    "supports_interface",
)

TBA_INTERFACE_ID = interface_id(ACCOUNT_ENTRYPOINTS)


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------

class AssetBinding(BaseModel):
    """The (token contract, token id) pair an account is bound to. Immutable."""

    model_config = ConfigDict(frozen=True)

    token_contract: int = Field(gt=0, lt=FELT_BOUND)
    token_id: int = Field(ge=0, le=U256_MAX)

    def as_tuple(self) -> Tuple[int, int]:
        return self.token_contract, self.token_id


class Call(BaseModel):
    model_config = ConfigDict(frozen=True)

    to: int = Field(ge=0, lt=FELT_BOUND)
    selector: str = Field(min_length=1)
    calldata: Tuple[int, ...] = ()

    @field_validator("calldata", mode="before")
    @classmethod
    def _coerce_calldata(cls, v):
        return tuple(v) if isinstance(v, (list, tuple)) else v

    @field_validator("calldata")
    @classmethod
    def _felts_only(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        for word in v:
            if not is_felt(word):
                raise ValueError(f"calldata word is not a field element: {word!r}")
        return v


class TxInfo(BaseModel):
    """Subset of the host's transaction info the account reads."""

    model_config = ConfigDict(frozen=True)

    transaction_hash: int = Field(ge=0, lt=FELT_BOUND)
    signature: Tuple[int, ...] = ()
    account_address: int = ZERO_ADDRESS
    version: int = 1


ReturnData = List[int]
