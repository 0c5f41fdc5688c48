# tokenbound/account/lock.py
# -*- coding: utf-8 -*-
"""
Time lock.

Locked/unlocked is derived from the stored unlock timestamp and the host
clock; there is no explicit unlock. ``lock`` only writes while unlocked,
so the timestamp never moves backwards.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from tokenbound.account.state import AccountState
from tokenbound.errors import AccountLocked, AlreadyLocked, LockDurationExceeded, Overflow
from tokenbound.types import U64_MAX
from tokenbound.utils.time import format_duration

logger = logging.getLogger("tokenbound.account.lock")


class LockState:
    def __init__(
        self,
        state: AccountState,
        now: Callable[[], int],
        *,
        max_duration: Optional[int] = None,
    ) -> None:
        self.state = state
        self._now = now
        self.max_duration = max_duration

    def is_locked(self) -> Tuple[bool, int]:
        current = self._now()
        unlock = self.state.unlock_timestamp
        if current < unlock:
            return True, unlock - current
        return False, 0

    def assert_unlocked(self) -> None:
        locked, remaining = self.is_locked()
        if locked:
            raise AccountLocked(remaining=remaining, unlock_timestamp=self.state.unlock_timestamp)

    def lock(self, duration: int) -> int:
        """
        Lock for ``duration`` seconds from now; return the unlock timestamp.
        The caller is expected to have passed the owner check already.
        """
        locked, remaining = self.is_locked()
        if locked:
            raise AlreadyLocked(remaining=remaining)
        if isinstance(duration, bool) or not isinstance(duration, int) or not 0 <= duration <= U64_MAX:
            raise Overflow("lock duration is not a u64", duration=duration)
        if self.max_duration is not None and duration > self.max_duration:
            raise LockDurationExceeded(duration=duration, max_duration=self.max_duration)

        current = self._now()
        unlock = current + duration
        if unlock > U64_MAX:
            raise Overflow("unlock timestamp does not fit in u64", now=current, duration=duration)

        self.state.set_unlock_timestamp(unlock)
        logger.info("locked for %s", format_duration(duration), extra={"unlock_timestamp": unlock})
        return unlock
