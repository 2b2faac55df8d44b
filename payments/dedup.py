"""
In-memory record of already-notified payment events.

Tokopay may redeliver a callback; with this store enabled a repeated
(reference_id, status) pair inside the retention window is not notified
twice. Process-local only: a restart or a second worker forgets it.
"""

import time
from collections import OrderedDict
from typing import Callable


class ProcessedReferenceStore:
    """Bounded-retention set of (reference_id, status) keys."""

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._seen: "OrderedDict[tuple[str, str], float]" = OrderedDict()

    def _evict(self, now: float) -> None:
        while self._seen:
            key, stamped = next(iter(self._seen.items()))
            if now - stamped < self.ttl_seconds and len(self._seen) <= self.max_entries:
                break
            self._seen.popitem(last=False)

    def check_and_add(self, reference_id: str, status: str) -> bool:
        """
        Record the event.

        Returns:
            True if it was new, False if seen within the window.

        Check and insert happen without an await in between, so this is
        atomic on a single event loop.
        """
        now = self._clock()
        self._evict(now)

        key = (reference_id, status)
        if key in self._seen:
            return False

        self._seen[key] = now
        return True

    def __len__(self) -> int:
        return len(self._seen)
