# tests/unit/test_resolver.py
from __future__ import annotations

from typing import List, Sequence

import pytest

from tests.conftest import ACCOUNT, ALICE, BOB, TOKEN_ID
from tokenbound.account.resolver import OwnershipResolver
from tokenbound.errors import ResolutionError
from tokenbound.host.memory import AssetContract, InMemoryHost
from tokenbound.types import U256_MAX


class RecordingHost(InMemoryHost):
    """Host that remembers which selectors were dispatched."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.selectors: List[str] = []

    def call_contract(self, sender: int, target: int, selector: str, calldata: Sequence[int]) -> List[int]:
        self.selectors.append(selector)
        return super().call_contract(sender, target, selector, calldata)


def _deploy(host: InMemoryHost, **kwargs) -> AssetContract:
    asset = host.deploy(0xBEEF, AssetContract(**kwargs))
    asset.mint(ALICE, TOKEN_ID)
    return asset


@pytest.mark.parametrize(
    "conventions,expected_selectors",
    [
        (("camel", "snake"), ["ownerOf"]),
        (("camel",), ["ownerOf"]),
        (("snake",), ["ownerOf", "owner_of"]),
    ],
)
def test_resolves_camel_first_then_snake(clock, conventions, expected_selectors):
    host = RecordingHost(clock)
    asset = _deploy(host, conventions=conventions)
    resolver = OwnershipResolver(host, ACCOUNT)

    assert resolver.resolve_owner(asset.address, TOKEN_ID) == ALICE
    assert host.selectors == expected_selectors


def test_neither_convention_fails_after_two_attempts(clock):
    host = RecordingHost(clock)
    asset = _deploy(host, conventions=())
    resolver = OwnershipResolver(host, ACCOUNT)

    with pytest.raises(ResolutionError) as ei:
        resolver.resolve_owner(asset.address, TOKEN_ID)
    assert host.selectors == ["ownerOf", "owner_of"]
    assert len(ei.value.details["failures"]) == 2


def test_undecodable_response_is_rejected(host):
    asset = _deploy(host, malformed_owner_response=True)
    with pytest.raises(ResolutionError, match="undecodable"):
        OwnershipResolver(host, ACCOUNT).resolve_owner(asset.address, TOKEN_ID)


def test_unknown_token_and_unknown_contract_fail(host):
    asset = _deploy(host)
    resolver = OwnershipResolver(host, ACCOUNT)
    with pytest.raises(ResolutionError):
        resolver.resolve_owner(asset.address, 999)
    with pytest.raises(ResolutionError):
        resolver.resolve_owner(0xDEAD, TOKEN_ID)


def test_token_id_outside_u256_is_rejected(host):
    asset = _deploy(host)
    with pytest.raises(ResolutionError):
        OwnershipResolver(host, ACCOUNT).resolve_owner(asset.address, U256_MAX + 1)


def test_high_token_ids_are_split_into_two_words(host):
    asset = _deploy(host)
    big_id = 2**200 + 7
    asset.mint(BOB, big_id)
    assert OwnershipResolver(host, ACCOUNT).resolve_owner(asset.address, big_id) == BOB


def test_no_caching_between_resolutions(host):
    asset = _deploy(host)
    resolver = OwnershipResolver(host, ACCOUNT)
    assert resolver.resolve_owner(asset.address, TOKEN_ID) == ALICE
    asset.transfer(TOKEN_ID, BOB)
    assert resolver.resolve_owner(asset.address, TOKEN_ID) == BOB


def test_zero_owner_is_not_an_owner(host):
    asset = _deploy(host)
    asset.transfer(TOKEN_ID, 0)
    with pytest.raises(ResolutionError, match="no owner"):
        OwnershipResolver(host, ACCOUNT).resolve_owner(asset.address, TOKEN_ID)
