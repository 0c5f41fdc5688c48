# tokenbound/account/codec.py
# -*- coding: utf-8 -*-
"""
Calldata layout of the account's entry points when it is called by another
contract (for example an account that owns the bound token).

    calls      [n, to_0, selector_0, len_0, *data_0, ..., to_n-1, ...]
    responses  [n, len_0, *ret_0, ..., len_n-1, *ret_n-1]
    array      [len, *items]

Selectors travel as short strings (see ``types.encode_short_string``).
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from tokenbound.types import Call, ReturnData, decode_short_string, encode_short_string


def encode_array(items: Sequence[int]) -> List[int]:
    return [len(items), *items]


def decode_array(words: Sequence[int], offset: int = 0) -> Tuple[List[int], int]:
    """Read one length-prefixed array at ``offset``; return it and the next offset."""
    if offset >= len(words):
        raise ValueError("calldata ended before array length")
    length = words[offset]
    start, end = offset + 1, offset + 1 + length
    if length < 0 or end > len(words):
        raise ValueError(f"array of length {length} does not fit in calldata")
    return list(words[start:end]), end


def encode_calls(calls: Sequence[Call]) -> List[int]:
    out = [len(calls)]
    for call in calls:
        out += [call.to, encode_short_string(call.selector), *encode_array(call.calldata)]
    return out


def decode_calls(words: Sequence[int]) -> List[Call]:
    if not words:
        raise ValueError("empty calldata")
    calls: List[Call] = []
    offset = 1
    for _ in range(words[0]):
        if offset + 2 > len(words):
            raise ValueError("calldata ended inside a call header")
        to, selector = words[offset], decode_short_string(words[offset + 1])
        data, offset = decode_array(words, offset + 2)
        calls.append(Call(to=to, selector=selector, calldata=data))
    if offset != len(words):
        raise ValueError("trailing words after the last call")
    return calls


def encode_responses(responses: Sequence[ReturnData]) -> List[int]:
    out = [len(responses)]
    for ret in responses:
        out += encode_array(ret)
    return out


def decode_responses(words: Sequence[int]) -> List[ReturnData]:
    if not words:
        raise ValueError("empty return data")
    responses: List[ReturnData] = []
    offset = 1
    for _ in range(words[0]):
        ret, offset = decode_array(words, offset)
        responses.append(ret)
    return responses
