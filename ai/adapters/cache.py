from __future__ import annotations
"""Caching utilities for adapter layer.

CatalogCache – short-lived in-memory cache of discovered model catalogs, keyed
by backend id.  Only successful, non-empty catalogs are stored so a failed
discovery call is retried on the next request.  ``get``/``set`` only guard the
store itself; callers that must not fetch twice on a miss hold
``fetch_lock(key)`` around the lookup and the fetch.
"""

import asyncio
import time
from typing import Dict, List, Optional, Tuple

__all__ = [
    "CatalogCache",
]


class CatalogCache:
    """Simple asyncio-safe TTL cache for backend id → model names."""

    def __init__(self, ttl_sec: int = 300, max_size: int = 64) -> None:
        self._ttl = ttl_sec
        self._max_size = max_size
        self._store: Dict[str, Tuple[float, List[str]]] = {}
        self._lock = asyncio.Lock()
        self._fetch_locks: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    def fetch_lock(self, key: str) -> asyncio.Lock:
        """Per-key lock serialising cache misses, so one catalog call serves concurrent callers."""
        lock = self._fetch_locks.get(key)
        if lock is None:
            lock = self._fetch_locks[key] = asyncio.Lock()
        return lock

    async def get(self, key: str) -> Optional[List[str]]:
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            ts, models = entry
            if time.monotonic() - ts > self._ttl:
                # expired
                del self._store[key]
                return None
            return list(models)

    async def set(self, key: str, models: List[str]) -> None:
        if not models:
            return
        async with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                # Evict oldest
                oldest_key = min(self._store.items(), key=lambda kv: kv[1][0])[0]
                self._store.pop(oldest_key, None)
            self._store[key] = (time.monotonic(), list(models))

    async def invalidate(self, key: Optional[str] = None) -> None:
        async with self._lock:
            if key is None:
                self._store.clear()
            else:
                self._store.pop(key, None)
