"""Process-wide daily budget for reference-search queries."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
import logging
import threading

log = logging.getLogger(__name__)


def _utc_today() -> date:
    return datetime.now(UTC).date()


class DailyQuota:
    """A counter that admits at most ``limit`` acquisitions per UTC day.

    One instance is shared by every engine (and so every pipeline run) in a
    process; ``try_acquire`` is atomic across threads and tasks.
    """

    def __init__(self, limit: int, *, clock: Callable[[], date] = _utc_today) -> None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self._limit = limit
        self._clock = clock
        self._lock = threading.Lock()
        self._day = clock()
        self._used = 0

    def _roll_over(self) -> None:
        today = self._clock()
        if today != self._day:
            log.info("Search quota reset for %s (used %d/%d)", today, self._used, self._limit)
            self._day = today
            self._used = 0

    def try_acquire(self) -> bool:
        """Consume one query if any remain today."""
        with self._lock:
            self._roll_over()
            if self._used >= self._limit:
                return False
            self._used += 1
            return True

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def used(self) -> int:
        with self._lock:
            self._roll_over()
            return self._used

    @property
    def remaining(self) -> int:
        with self._lock:
            self._roll_over()
            return self._limit - self._used

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0
