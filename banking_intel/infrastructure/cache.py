"""In-memory TTL cache for generated reports"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from banking_intel.domain.models import Report

CacheKey = Tuple[str, str, bool]


def report_cache_key(user_id: str, timeframe: str, include_detailed: bool) -> CacheKey:
    return (user_id, timeframe, include_detailed)


@dataclass
class _Entry:
    report: Report
    created_at: float
    expires_at: float
    access_count: int = 0


class ReportCache:
    """
    Process-local report cache with per-entry TTL and oldest-first eviction.

    Not shared across workers. Statement reports must never be stored here
    since their content is not determined by the key.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_size: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[Hashable, _Entry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Optional[Report]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if self._clock() > entry.expires_at:
            del self._entries[key]
            self.misses += 1
            return None

        entry.access_count += 1
        self.hits += 1
        return entry.report

    def set(self, key: Hashable, report: Report, ttl_seconds: Optional[float] = None) -> None:
        now = self._clock()
        self.cleanup()

        if key in self._entries:
            del self._entries[key]
        while self._entries and len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logging.debug(f"Report cache full, evicted {evicted}")

        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = _Entry(report=report, created_at=now, expires_at=now + ttl)

    def delete(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and return how many were removed"""
        removed = len(self._entries)
        self._entries.clear()
        logging.info(f"Cleared {removed} report cache entries", extra={"step": "cache_clear"})
        return removed

    def cleanup(self) -> int:
        """Remove expired entries"""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        created = [entry.created_at for entry in self._entries.values()]
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "total_access": sum(entry.access_count for entry in self._entries.values()),
            "oldest_entry_age_seconds": round(now - min(created), 3) if created else 0.0,
            "newest_entry_age_seconds": round(now - max(created), 3) if created else 0.0,
        }
