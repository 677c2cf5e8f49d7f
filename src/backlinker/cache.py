"""Time- and modification-aware cache of backlink discovery results.

An entry is valid while both hold:

* it is no older than ``ttl`` milliseconds, and
* the target document has not been modified since the entry was stored
  (documents that cannot be stat'd fall back to the age check alone).

Invalid entries are evicted lazily when looked up, and in bulk when the cache
grows past ``max_size``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from backlinker.config import DEFAULT_CACHE_TIMEOUT_MS, DEFAULT_MAX_CACHE_SIZE
from backlinker.log import get_logger
from backlinker.provider import NoteIndexProvider

Clock = Callable[[], int]


def system_clock() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    file_path: str
    backlinks: tuple[str, ...]
    timestamp: int           # epoch ms when stored
    file_modified_time: int  # target mtime (ms) when stored, 0 if unknown


@dataclass(frozen=True)
class CacheStatistics:
    total_cached_files: int
    cache_hits: int
    cache_misses: int
    cache_hit_rate: float
    last_cleanup: int  # epoch ms


class BacklinkCache:
    """Bounded backlink cache keyed by target document path."""

    def __init__(
        self,
        provider: NoteIndexProvider,
        *,
        ttl: int = DEFAULT_CACHE_TIMEOUT_MS,
        max_size: int = DEFAULT_MAX_CACHE_SIZE,
        clock: Clock = system_clock,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._clock = clock
        self._logger = logger or get_logger("cache")
        self._entries: dict[str, CacheEntry] = {}
        self.ttl = ttl
        self.max_size = max_size
        self._hits = 0
        self._misses = 0
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    # ------------------------------------------------------------------
    # Lookup / store
    # ------------------------------------------------------------------

    def get(self, path: str) -> list[str] | None:
        """Return a copy of the cached backlinks, or ``None`` on miss/expiry."""
        entry = self._entries.get(path)
        if entry is None:
            self._misses += 1
            self._logger.debug("Cache miss for %s", path)
            return None
        if not self._is_entry_valid(entry):
            del self._entries[path]
            self._misses += 1
            self._logger.debug("Evicted stale cache entry for %s", path)
            return None
        self._hits += 1
        return list(entry.backlinks)

    def put(self, path: str, backlinks: list[str]) -> None:
        """Store a copy of *backlinks* for *path*, stamped with now and its mtime."""
        entry = CacheEntry(
            file_path=path,
            backlinks=tuple(backlinks),
            timestamp=self._clock(),
            file_modified_time=self._modified_time(path) or 0,
        )
        self._entries[path] = entry
        if len(self._entries) > self.max_size:
            self.cleanup()
        self._logger.debug(
            "Cached %d backlinks for %s (size=%d)", len(entry.backlinks), path, len(self._entries)
        )

    def invalidate(self, path: str) -> None:
        existed = self._entries.pop(path, None) is not None
        self._logger.debug("Invalidated %s (existed=%s)", path, existed)

    def clear(self) -> None:
        """Drop every entry and reset hit/miss counters."""
        previous = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._last_cleanup = self._clock()
        self._logger.debug("Cleared %d cache entries", previous)

    def is_valid(self, path: str) -> bool:
        entry = self._entries.get(path)
        return entry is not None and self._is_entry_valid(entry)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def set_ttl(self, ttl: int) -> None:
        self.ttl = ttl

    def set_max_size(self, max_size: int) -> None:
        self.max_size = max_size
        if len(self._entries) > self.max_size:
            self.cleanup()

    def cleanup(self) -> int:
        """Evict invalid entries, then the oldest ones until within ``max_size``.

        Returns the number of entries removed.
        """
        stale = [p for p, e in self._entries.items() if not self._is_entry_valid(e)]
        for path in stale:
            del self._entries[path]
        removed = len(stale)

        overflow = len(self._entries) - self.max_size
        if overflow > 0:
            oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)[:overflow]
            for entry in oldest:
                del self._entries[entry.file_path]
            removed += len(oldest)

        self._last_cleanup = self._clock()
        self._logger.debug("Cache cleanup removed %d entries (size=%d)", removed, len(self._entries))
        return removed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def entry(self, path: str) -> CacheEntry | None:
        return self._entries.get(path)

    def entries(self) -> list[CacheEntry]:
        return list(self._entries.values())

    def statistics(self) -> CacheStatistics:
        total = self._hits + self._misses
        return CacheStatistics(
            total_cached_files=len(self._entries),
            cache_hits=self._hits,
            cache_misses=self._misses,
            cache_hit_rate=self._hits / total if total else 0.0,
            last_cleanup=self._last_cleanup,
        )

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------

    def _is_entry_valid(self, entry: CacheEntry) -> bool:
        age = self._clock() - entry.timestamp
        if age > self.ttl:
            return False
        mtime = self._modified_time(entry.file_path)
        return mtime is None or mtime <= entry.file_modified_time

    def _modified_time(self, path: str) -> int | None:
        try:
            return self._provider.stat_modified_time(path)
        except Exception:  # noqa: BLE001
            self._logger.warning("Cannot stat %s; using age-only validity", path, exc_info=True)
            return None
