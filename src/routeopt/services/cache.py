"""Time-bounded in-memory caches shared by the optimization pipeline.

Entries expire lazily: a read that finds an entry older than the TTL deletes
it and reports a miss. There is no background sweeper and no size bound, so
the key space must stay small (stop-pair coordinates of a single stop list).
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Generic, Optional, TypeVar

from ..config import settings
from ..models.domain import SpeedSample

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    timestamp: float


class TTLCache(Generic[T]):
    """String-keyed cache whose entries expire ``ttl_minutes`` after ``set``."""

    def __init__(self, ttl_minutes: float = 15.0, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_minutes <= 0:
            raise ValueError("TTL must be positive.")
        self.ttl_seconds = ttl_minutes * 60.0
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.value

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        # Counts expired-but-unread entries too.
        with self._lock:
            return len(self._entries)


@dataclass(slots=True)
class RoutingCaches:
    """The three caches used by the matrix builder and traffic estimator."""

    traffic_speed: TTLCache[SpeedSample]
    traffic_time: TTLCache
    route: TTLCache

    @classmethod
    def from_settings(cls, clock: Callable[[], float] = time.monotonic) -> "RoutingCaches":
        return cls(
            traffic_speed=TTLCache(settings.traffic_speed_ttl_minutes, clock=clock),
            traffic_time=TTLCache(settings.traffic_time_ttl_minutes, clock=clock),
            route=TTLCache(settings.route_ttl_minutes, clock=clock),
        )

    def clear(self) -> None:
        self.traffic_speed.clear()
        self.traffic_time.clear()
        self.route.clear()

    def sizes(self) -> dict[str, int]:
        return {
            "traffic_speed": len(self.traffic_speed),
            "traffic_time": len(self.traffic_time),
            "route": len(self.route),
        }


@lru_cache(maxsize=1)
def get_caches() -> RoutingCaches:
    """Process-wide cache bundle, created on first use."""
    return RoutingCaches.from_settings()


def _point(lat: float, lon: float) -> str:
    # 41 and 41.0 must map to the same key
    return f"{float(lat)},{float(lon)}"


def speed_key(lat: float, lon: float) -> str:
    return f"traffic:{_point(lat, lon)}"


def traffic_time_key(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> str:
    return f"trafficTime:{_point(from_lat, from_lon)}:{_point(to_lat, to_lon)}"


def route_key(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> str:
    return f"route:{_point(from_lat, from_lon)}:{_point(to_lat, to_lon)}"
