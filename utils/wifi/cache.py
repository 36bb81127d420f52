"""
Versioned, short-lived cache for the last network scan.

A single slot holds the latest snapshot. Entries written by a build with a
different CACHE_VERSION, or older than the freshness window, read as absent.
The slot lives in the settings table by default, so deleting the database is
the same as a cold start.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from utils.database import delete_setting, get_setting, set_setting
from utils.logging import get_logger

from .constants import CACHE_KEY, CACHE_TTL_SECONDS, CACHE_VERSION
from .models import CacheEntry, ScanSnapshot

logger = get_logger('wificonnect.wifi.cache')


class SettingsStore:
    """Key-value store backed by the settings table."""

    def get(self, key: str) -> Any:
        return get_setting(key)

    def set(self, key: str, value: Any) -> None:
        set_setting(key, value)

    def delete(self, key: str) -> None:
        delete_setting(key)


class MemoryStore:
    """In-process key-value store."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class NetworkCache:
    """
    Single-slot snapshot cache.

    Args:
        store: Object with get/set/delete by key.
        clock: Returns the current time in seconds.
        ttl: Freshness window in seconds.
        version: Expected entry version.
    """

    def __init__(
        self,
        store: Optional[Any] = None,
        clock: Callable[[], float] = time.time,
        ttl: float = CACHE_TTL_SECONDS,
        version: int = CACHE_VERSION,
        key: str = CACHE_KEY,
    ):
        self._store = store if store is not None else SettingsStore()
        self._clock = clock
        self._ttl = ttl
        self._version = version
        self._key = key

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def version(self) -> int:
        return self._version

    def read(self) -> Optional[ScanSnapshot]:
        """Return the cached snapshot, or None if absent, stale or foreign."""
        raw = self._store.get(self._key)
        if not raw:
            return None

        try:
            entry = CacheEntry.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Discarding unreadable cache entry: {e}")
            return None

        if entry.version != self._version:
            logger.debug(f"Cache version {entry.version} != {self._version}, ignoring")
            return None

        if entry.age(self._clock()) >= self._ttl:
            return None

        entry.snapshot.from_cache = True
        return entry.snapshot

    def write(self, snapshot: ScanSnapshot) -> None:
        """Overwrite the slot with a freshly stamped entry."""
        entry = CacheEntry(
            snapshot=snapshot,
            version=self._version,
            captured_at=self._clock(),
        )
        self._store.set(self._key, entry.to_dict())

    def invalidate(self) -> None:
        """Clear the slot."""
        self._store.delete(self._key)
