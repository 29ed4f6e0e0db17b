"""
Facet Cache — SHA-256 hash-based extraction caching.

Caches extracted facets per unit content, keyed by content hash together
with the language, unit kind and data-provider flag. Extraction is pure,
so a hit returns exactly what re-extraction would.
"""

from __future__ import annotations

import hashlib
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from rulegate.config import settings
from rulegate.models.source_models import Facets, UnitKind


@dataclass
class CacheEntry:
    """Cached facets for a single unit content."""

    content_hash: str
    facets: Facets
    timestamp: float = field(default_factory=time.time)

    @property
    def is_expired(self) -> bool:
        return (time.time() - self.timestamp) > settings.cache_ttl_seconds


class FacetCache:
    """
    In-memory facet cache keyed by SHA-256 of unit content.

    Safe to share between worker threads.
    """

    def __init__(self) -> None:
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def hash_content(content: str) -> str:
        """Compute SHA-256 hash of unit content."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    @classmethod
    def key_for(cls, content: str, language: str, unit_kind: UnitKind, data_provider: bool) -> str:
        return f"{language}:{unit_kind.value}:{int(data_provider)}:{cls.hash_content(content)}"

    def get(
        self, content: str, language: str, unit_kind: UnitKind, data_provider: bool = False
    ) -> Facets | None:
        """
        Look up cached facets.

        Returns None if not cached or expired.
        """
        key = self.key_for(content, language, unit_kind, data_provider)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.is_expired:
                del self._store[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.facets

    def put(
        self,
        content: str,
        language: str,
        unit_kind: UnitKind,
        facets: Facets,
        data_provider: bool = False,
    ) -> None:
        """Cache extracted facets for a unit content."""
        key = self.key_for(content, language, unit_kind, data_provider)
        with self._lock:
            self._store[key] = CacheEntry(content_hash=key.rsplit(":", 1)[-1], facets=facets)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._store.clear()

    @property
    def size(self) -> int:
        """Number of cached entries."""
        return len(self._store)

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        with self._lock:
            expired = sum(1 for e in self._store.values() if e.is_expired)
            total = len(self._store)
        return {
            "total_entries": total,
            "expired_entries": expired,
            "active_entries": total - expired,
            "hits": self.hits,
            "misses": self.misses,
        }
