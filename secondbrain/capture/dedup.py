"""Bounded in-process window of recently seen Slack correlation ids."""

import time
from collections import OrderedDict
from functools import lru_cache
from typing import Callable

from secondbrain.shared import DEFAULT_DEDUP_WINDOW_SIZE, dedup_window_size


class DedupWindow:
    """
    Remember the newest `max_size` correlation ids to drop Slack redeliveries.

    Not persisted and not locked: a restart forgets everything and two truly
    concurrent deliveries of one id may both pass. Both only ever cost a
    duplicate filed record.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_DEDUP_WINDOW_SIZE,
        *,
        max_age_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be a positive integer.")
        self.max_size = max_size
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._seen: OrderedDict[str, float] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, correlation_id: str) -> bool:
        return self.seen(correlation_id)

    def seen(self, correlation_id: str) -> bool:
        """Return whether the id is currently inside the window."""
        self._expire()
        return correlation_id in self._seen

    def add(self, correlation_id: str) -> None:
        """Record an id as newest and prune the oldest beyond `max_size`."""
        self._seen[correlation_id] = self._clock()
        self._seen.move_to_end(correlation_id)
        while len(self._seen) > self.max_size:
            self._seen.popitem(last=False)

    def check_and_add(self, correlation_id: str) -> bool:
        """
        Record the id and report whether it is new.

        Returns:
            True when the id was not in the window (caller should process it),
            False for a duplicate.
        """
        if self.seen(correlation_id):
            return False
        self.add(correlation_id)
        return True

    def clear(self) -> None:
        self._seen.clear()

    def _expire(self) -> None:
        if self.max_age_seconds is None:
            return
        cutoff = self._clock() - self.max_age_seconds
        while self._seen:
            oldest_id, seen_at = next(iter(self._seen.items()))
            if seen_at >= cutoff:
                break
            self._seen.pop(oldest_id)


@lru_cache(maxsize=1)
def default_dedup_window() -> DedupWindow:
    """Return the process-wide window sized from SECONDBRAIN_DEDUP_WINDOW_SIZE."""
    return DedupWindow(max_size=dedup_window_size())
