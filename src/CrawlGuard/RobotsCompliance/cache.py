# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.cache",
#   "purpose": "Bounded, thread-safe host -> HostDirectives cache with TTL refetch and LRU eviction",
#   "sections": [
#     {"id": "cachestats", "name": "CacheStats", "anchor": "class-cachestats", "kind": "class"},
#     {"id": "directivecache", "name": "DirectiveCache", "anchor": "class-directivecache", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Bounded, thread-safe cache of robots.txt directives per host.

**Responsibilities**
--------------------
- Serve :class:`~CrawlGuard.RobotsCompliance.rules.HostDirectives` per
  lower-cased host name, fetching through the pipeline on a miss
- Refetch entries older than the TTL
- Keep at most ``max_entries`` hosts, evicting the least recently used

**Locking**
-----------
One lock guards every structural change of the mapping (insert, stale
removal, eviction) together with the size check that precedes eviction.
Lookups of an existing entry and rule evaluation run without it; access
timestamps are updated on the rule sets themselves.

Two threads that miss on the same host both fetch. The second insert
replaces the first without evicting anyone.

**Staleness**
-------------
A stale entry is removed before the refetch is issued, never updated in
place. Concurrent readers either see the old object or nothing, then the
fresh one.

**Eviction**
------------
When an insert for a new host would exceed capacity, the entry with the
smallest ``last_access_time()`` is removed (full scan; ties go to iteration
order).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .pipeline import FetchParsePipeline
from .rules import HostDirectives

__all__ = ["CacheStats", "DirectiveCache"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache counters."""

    size: int
    max_entries: int
    fetches: int
    refetches: int
    evictions: int


class DirectiveCache:
    """Host-keyed cache of :class:`HostDirectives`.

    Attributes:
        max_entries: Capacity; at most this many hosts are held.
        ttl: Age in seconds after which an entry is refetched before use.
    """

    def __init__(self, pipeline: FetchParsePipeline, max_entries: int, ttl: float) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self.pipeline = pipeline
        self.max_entries = max_entries
        self.ttl = ttl
        self._entries: Dict[str, HostDirectives] = {}
        self._lock = threading.Lock()
        self._fetches = 0
        self._refetches = 0
        self._evictions = 0

    def get(self, host: str, port: Optional[int] = None) -> HostDirectives:
        """Return fresh directives for ``host``, fetching them if needed.

        ``port`` only affects the robots.txt URL; entries are keyed by host.
        """
        key = host.lower()
        directives = self._entries.get(key)

        if directives is not None and directives.needs_refetch(self.ttl):
            with self._lock:
                if self._entries.get(key) is directives:
                    del self._entries[key]
                self._refetches += 1
            logger.debug("robots.txt for %s expired; refetching", key)
            directives = None

        if directives is None:
            logger.debug("robots.txt cache miss for %s", key)
            directives = self.pipeline.fetch_directives(key, port)
            self._insert(key, directives)
        else:
            directives.record_access()
        return directives

    def _insert(self, key: str, directives: HostDirectives) -> None:
        with self._lock:
            self._fetches += 1
            if key not in self._entries:
                while len(self._entries) >= self.max_entries:
                    self._evict_oldest()
            self._entries[key] = directives

    def _evict_oldest(self) -> None:
        # Caller holds self._lock.
        min_host = min(self._entries, key=lambda h: self._entries[h].last_access_time())
        del self._entries[min_host]
        self._evictions += 1
        logger.debug("Evicted robots.txt directives for %s", min_host)

    def peek(self, host: str) -> Optional[HostDirectives]:
        """Cached entry for ``host`` without fetching, refreshing or touching it."""
        return self._entries.get(host.lower())

    def invalidate(self, host: str) -> bool:
        """Drop ``host`` so the next :meth:`get` refetches. Returns whether it was cached."""
        with self._lock:
            return self._entries.pop(host.lower(), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def hosts(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_entries=self.max_entries,
                fetches=self._fetches,
                refetches=self._refetches,
                evictions=self._evictions,
            )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and host.lower() in self._entries
