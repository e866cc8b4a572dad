"""In-process TTL cache for scraped product reviews.

Entries expire ``ttl_seconds`` after they were written. Expiry is checked
on every ``get`` and, to bound memory, by a background asyncio task that
sweeps expired entries every ``check_period_seconds``. The sweep only
affects memory usage: a lookup never returns an expired entry.

Entries are immutable tuples replaced under a lock, so concurrent readers
never observe a partially written entry.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from review_service.schemas.review import Review
from review_service.services.metrics import REVIEW_CACHE_LOOKUPS_TOTAL

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 86400
DEFAULT_CHECK_PERIOD_SECONDS = 120


@dataclass(frozen=True)
class CacheEntry:
    reviews: Tuple[Review, ...]
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    keys: int = 0


class ReviewCache:
    """ASIN -> review list cache with per-entry expiry.

    Args:
        ttl_seconds: Lifetime of an entry from the moment it is written.
        check_period_seconds: Interval of the background sweep.
        clock: Monotonic time source; tests pass a fake clock.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        check_period_seconds: float = DEFAULT_CHECK_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.check_period_seconds = check_period_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, asin: str) -> Optional[List[Review]]:
        """Return cached reviews for ``asin``, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(asin)
            if entry is not None and entry.is_expired(now):
                del self._entries[asin]
                self._stats.evictions += 1
                entry = None
            if entry is None:
                self._stats.misses += 1
            else:
                self._stats.hits += 1

        REVIEW_CACHE_LOOKUPS_TOTAL.labels(result="miss" if entry is None else "hit").inc()
        if entry is None:
            return None
        return list(entry.reviews)

    def set(self, asin: str, reviews: Iterable[Review]) -> None:
        """Store ``reviews`` under ``asin`` with a fresh TTL, replacing any entry."""
        entry = CacheEntry(
            reviews=tuple(reviews),
            expires_at=self._clock() + self.ttl_seconds,
        )
        with self._lock:
            self._entries[asin] = entry
            self._stats.sets += 1

    def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._stats.evictions += len(expired)

        if expired:
            logger.debug("Review cache sweep evicted %d entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        """Snapshot of the counters; ``keys`` counts live entries only."""
        now = self._clock()
        with self._lock:
            live = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                sets=self._stats.sets,
                evictions=self._stats.evictions,
                keys=live,
            )

    def __len__(self) -> int:
        return self.stats().keys

    def __contains__(self, asin: object) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(asin)  # type: ignore[arg-type]
            return entry is not None and not entry.is_expired(now)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.check_period_seconds)
            try:
                self.sweep()
            except Exception:
                logger.exception("Review cache sweep failed")

    def start(self) -> None:
        """Start the background sweep task. Must be called from a running loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())
        logger.info(
            "Review cache sweeper started (ttl=%ss, check_period=%ss)",
            self.ttl_seconds,
            self.check_period_seconds,
        )

    async def stop(self) -> None:
        """Cancel the background sweep task and wait for it to finish."""
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is None:
            return
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        logger.info("Review cache sweeper stopped")

    @property
    def is_sweeping(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()
