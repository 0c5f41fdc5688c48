# tests/unit/test_lock.py
from __future__ import annotations

import pytest

from tests.conftest import ASSET, T0, TOKEN_ID
from tokenbound.account.lock import LockState
from tokenbound.account.state import AccountState
from tokenbound.errors import AccountLocked, AlreadyLocked, LockDurationExceeded, Overflow
from tokenbound.types import U64_MAX, AssetBinding
from tokenbound.utils.time import FrozenClock


def _lock_state(clock: FrozenClock, **kwargs) -> LockState:
    state = AccountState.initialize({}, AssetBinding(token_contract=ASSET, token_id=TOKEN_ID))
    return LockState(state, clock.timestamp, **kwargs)


def test_fresh_account_is_unlocked(clock):
    ls = _lock_state(clock)
    assert ls.is_locked() == (False, 0)
    ls.assert_unlocked()


def test_remaining_time_counts_down_and_never_goes_negative(clock):
    ls = _lock_state(clock)
    assert ls.lock(100) == T0 + 100
    assert ls.is_locked() == (True, 100)

    clock.advance(50)
    assert ls.is_locked() == (True, 50)
    with pytest.raises(AccountLocked):
        ls.assert_unlocked()

    clock.advance(50)
    assert ls.is_locked() == (False, 0)
    clock.advance(1_000)
    assert ls.is_locked() == (False, 0)
    ls.assert_unlocked()


def test_lock_while_locked_is_rejected_and_keeps_timestamp(clock):
    ls = _lock_state(clock)
    ls.lock(100)
    clock.advance(10)
    with pytest.raises(AlreadyLocked):
        ls.lock(5)
    assert ls.state.unlock_timestamp == T0 + 100


def test_relock_after_expiry_moves_timestamp_forward(clock):
    ls = _lock_state(clock)
    ls.lock(10)
    clock.advance(10)
    ls.lock(20)
    assert ls.state.unlock_timestamp == T0 + 30
    assert ls.is_locked() == (True, 20)


def test_zero_duration_lock_is_immediately_expired(clock):
    ls = _lock_state(clock)
    ls.lock(0)
    assert ls.is_locked() == (False, 0)


@pytest.mark.parametrize("duration", [U64_MAX, U64_MAX - T0 + 1, U64_MAX + 1, -1])
def test_overflowing_durations_are_rejected(clock, duration):
    ls = _lock_state(clock)
    with pytest.raises(Overflow):
        ls.lock(duration)
    assert ls.state.unlock_timestamp == 0


def test_largest_representable_unlock_time(clock):
    ls = _lock_state(clock)
    ls.lock(U64_MAX - T0)
    assert ls.state.unlock_timestamp == U64_MAX


def test_configured_maximum_duration(clock):
    ls = _lock_state(clock, max_duration=3600)
    ls.lock(3600)
    clock.advance(3600)
    with pytest.raises(LockDurationExceeded):
        ls.lock(3601)


def test_state_timestamp_never_decreases():
    state = AccountState.initialize({}, AssetBinding(token_contract=ASSET, token_id=TOKEN_ID))
    state.set_unlock_timestamp(500)
    with pytest.raises(ValueError):
        state.set_unlock_timestamp(499)
    with pytest.raises(ValueError):
        state.set_unlock_timestamp(U64_MAX + 1)


def test_state_is_a_view_over_storage():
    storage = {}
    state = AccountState.initialize(storage, AssetBinding(token_contract=ASSET, token_id=TOKEN_ID))
    state.set_unlock_timestamp(T0)
    assert storage == {"token_contract": ASSET, "token_id": TOKEN_ID, "unlock_timestamp": T0}

    # откат хоста подменяет содержимое хранилища, а не сам объект
    storage.update(unlock_timestamp=0)
    assert state.unlock_timestamp == 0
    with pytest.raises(ValueError):
        AccountState.initialize(storage, AssetBinding(token_contract=ASSET, token_id=TOKEN_ID))
