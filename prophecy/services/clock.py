"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Day index derived from wall-clock time.
"""

from typing import Optional

from prophecy.schemas import SECONDS_PER_DAY
from prophecy.utils import now_ts


def current_day(now: int) -> int:
    """
    Map a unix timestamp to its day index.

    Args:
        now: Unix time in seconds (non-negative)

    Returns:
        floor(now / 86400)
    """
    if now < 0:
        raise ValueError(f"timestamp must be non-negative, got {now}")
    return now // SECONDS_PER_DAY


class SystemClock:
    """Reads the host clock."""

    def now(self) -> int:
        return now_ts()

    def today(self) -> int:
        return current_day(self.now())


class FrozenClock(SystemClock):
    """Manually driven clock for tests and local simulations."""

    def __init__(self, start: Optional[int] = None):
        self._now = now_ts() if start is None else int(start)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = int(timestamp)

    def advance(self, seconds: int) -> int:
        self._now += int(seconds)
        return self._now
