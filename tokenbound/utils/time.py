# tokenbound/utils/time.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional, Protocol, Union

from tokenbound.types import U64_MAX

# ============================================================
# Часы (Clock) — источник времени блока
# ============================================================

class Clock(Protocol):
    """Абстракция источника времени хоста (целые секунды эпохи, u64)."""
    def timestamp(self) -> int: ...

class SystemClock:
    """Системные часы: текущие секунды эпохи."""
    def timestamp(self) -> int:
        return int(time.time())

class FrozenClock:
    """Замороженные часы для тестов; управляются вручную через advance()/set()."""
    def __init__(self, start: Union[int, datetime, None] = None) -> None:
        self._now = _to_seconds(start) if start is not None else 1_700_000_000

    def timestamp(self) -> int:
        return self._now

    def advance(self, seconds: int) -> None:
        # время хоста не идёт назад
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        if self._now + seconds > U64_MAX:
            raise OverflowError("timestamp exceeds u64")
        self._now += seconds

    def set(self, ts: Union[int, datetime]) -> None:
        ts = _to_seconds(ts)
        if ts < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = ts

# ============================================================
# Утилиты
# ============================================================

def _to_seconds(v: Union[int, datetime]) -> int:
    if isinstance(v, datetime):
        if v.tzinfo is None:
            raise ValueError("naive datetime is not allowed; timezone-aware required")
        v = int(v.astimezone(timezone.utc).timestamp())
    if not 0 <= v <= U64_MAX:
        raise ValueError(f"timestamp out of u64 range: {v}")
    return v

def to_datetime(ts: int) -> datetime:
    """UTC datetime из секунд эпохи."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)

def format_duration(seconds: Optional[int]) -> str:
    """Человекочитаемая длительность: 1d2h3m4s."""
    if not seconds:
        return "0s"
    parts = []
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
        n, seconds = divmod(seconds, size)
        if n:
            parts.append(f"{n}{unit}")
    if seconds:
        parts.append(f"{seconds}s")
    return "".join(parts)
