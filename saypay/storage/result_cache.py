"""
In-process result cache with TTL and size-bounded eviction.

Two instances back the pipeline:
- audio fingerprint -> TranscriptionResult
- normalized transcript -> ExtractedExpenseDraft

Caches are owned by whoever composes the clients (see PipelineCaches) so
tests can reset them deterministically instead of relying on process lifetime.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from saypay.config import settings
from saypay.logging_config import get_logger
from saypay.schemas.audio import TranscriptionResult
from saypay.schemas.extraction import ExtractedExpenseDraft

logger = get_logger(__name__)

T = TypeVar("T")


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached result and the time it was stored."""

    result: T
    timestamp: int  # epoch ms


class ResultCache(Generic[T]):
    """
    Mapping with a fixed TTL and capacity.

    - Entries older than the TTL are never returned and are purged on
      lookup or on the next sweep.
    - When the capacity is exceeded the oldest entries (by timestamp)
      are evicted first.
    - Each entry is written whole, so readers never see a partial record.
    """

    def __init__(
        self,
        name: str,
        ttl_ms: int | None = None,
        max_entries: int | None = None,
        clock: Callable[[], int] = epoch_ms,
    ):
        self.name = name
        self.ttl_ms = ttl_ms if ttl_ms is not None else settings.cache_ttl_ms
        self.max_entries = (
            max_entries if max_entries is not None else settings.cache_max_entries
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _is_expired(self, entry: CacheEntry[T], now: int) -> bool:
        return now - entry.timestamp > self.ttl_ms

    def get(self, key: str) -> T | None:
        """Return the cached result, or None on miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            logger.debug("result_cache_expired", cache=self.name, key=key[:16])
            return None

        return entry.result

    def set(self, key: str, result: T) -> None:
        """Store a result stamped with the current time."""
        self._entries[key] = CacheEntry(result=result, timestamp=self._clock())
        if len(self._entries) > self.max_entries:
            self._evict_oldest(len(self._entries) - self.max_entries)

    def _evict_oldest(self, count: int) -> None:
        oldest = sorted(self._entries, key=lambda k: self._entries[k].timestamp)[:count]
        for key in oldest:
            del self._entries[key]
        logger.debug("result_cache_evicted", cache=self.name, evicted=len(oldest))

    def sweep(self) -> int:
        """
        Purge expired entries and enforce the capacity.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]

        removed = len(expired)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            self._evict_oldest(overflow)
            removed += overflow

        if removed:
            logger.debug("result_cache_swept", cache=self.name, removed=removed)
        return removed

    def clear(self) -> None:
        self._entries.clear()


@dataclass
class PipelineCaches:
    """The two result caches used by the voice pipeline."""

    transcripts: ResultCache[TranscriptionResult] = field(
        default_factory=lambda: ResultCache("transcripts")
    )
    extractions: ResultCache[ExtractedExpenseDraft] = field(
        default_factory=lambda: ResultCache("extractions")
    )

    @classmethod
    def with_clock(cls, clock: Callable[[], int]) -> "PipelineCaches":
        """Build both caches on a shared clock (tests inject a fake one)."""
        return cls(
            transcripts=ResultCache("transcripts", clock=clock),
            extractions=ResultCache("extractions", clock=clock),
        )

    def sweep(self) -> int:
        return self.transcripts.sweep() + self.extractions.sweep()

    def clear(self) -> None:
        self.transcripts.clear()
        self.extractions.clear()

    async def run_sweeper(self, interval_seconds: float | None = None) -> None:
        """
        Periodically sweep both caches until cancelled.

        Runs on the event loop like every other stage, so no locking is needed.
        """
        interval = (
            interval_seconds
            if interval_seconds is not None
            else settings.cache_sweep_interval_seconds
        )
        logger.info("result_cache_sweeper_started", interval_seconds=interval)
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            logger.info("result_cache_sweep_completed", removed=removed)
