"""
geo_resolver/cache.py
In-process TTL cache for resolved distances.

Entries are evicted lazily when read after expiry; nothing sweeps in the
background.  Concurrent writers for the same key simply overwrite each
other (last write wins).
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from geo_resolver.geo import DistanceResult

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass
class DistanceCacheEntry:
    distance_km: float
    duration_hours: float
    source: str
    expires_at: float


class DistanceCache:

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = max(1.0, float(ttl_seconds))
        self._clock = clock
        self._entries: dict[str, DistanceCacheEntry] = {}

    @staticmethod
    def key(origin: Optional[str], destination: Optional[str]) -> str:
        return f"{str(origin or '').strip().lower()}|{str(destination or '').strip().lower()}"

    def get(self, key: str) -> Optional[DistanceCacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry

    def set(self, key: str, result: DistanceResult) -> None:
        self._entries[key] = DistanceCacheEntry(
            distance_km=result.distance_km,
            duration_hours=result.duration_hours,
            source=result.source,
            expires_at=self._clock() + self.ttl_seconds,
        )

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
