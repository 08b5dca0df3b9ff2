"""Traffic-adjusted travel time estimation.

Estimates are resolved in priority order: a previously computed value from
the traffic-time cache, a ratio derived from live speed samples at both
endpoints, and finally a deterministic synthetic delay. The synthetic delay
is a coordinate hash, not a traffic model; it only exists so that results
stay reproducible when no live data is available.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from ...config import settings
from ...models.domain import SpeedSample, Stop
from ..cache import TTLCache, speed_key, traffic_time_key

logger = logging.getLogger(__name__)

EstimateSource = Literal["cache", "live", "fallback"]

ORIGIN_RATIO_WEIGHT = 0.6
DESTINATION_RATIO_WEIGHT = 0.4


@dataclass(frozen=True, slots=True)
class TrafficEstimate:
    minutes: float
    source: EstimateSource

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


class LiveSpeedStrategy:
    """Scale the baseline by the congestion ratio observed at both endpoints."""

    def __init__(self, speed_cache: TTLCache[SpeedSample]) -> None:
        self.speed_cache = speed_cache

    @staticmethod
    def _ratio(sample: SpeedSample) -> float:
        return sample.free_flow_speed / max(1.0, sample.current_speed)

    def estimate(self, origin: Stop, destination: Stop, baseline_minutes: float, distance_km: float) -> Optional[float]:
        origin_sample = self.speed_cache.get(speed_key(origin.lat, origin.lon))
        destination_sample = self.speed_cache.get(speed_key(destination.lat, destination.lon))
        if origin_sample is None or destination_sample is None:
            return None
        ratio = (
            self._ratio(origin_sample) * ORIGIN_RATIO_WEIGHT
            + self._ratio(destination_sample) * DESTINATION_RATIO_WEIGHT
        )
        return baseline_minutes * ratio


class CoordinateHashStrategy:
    """Add a repeatable pseudo-random delay derived from the endpoint coordinates."""

    def __init__(self, max_delay_minutes: float | None = None) -> None:
        self.max_delay_minutes = (
            max_delay_minutes if max_delay_minutes is not None else settings.max_fallback_delay_minutes
        )

    @staticmethod
    def hash_factor(origin: Stop, destination: Stop) -> float:
        return math.fabs(math.sin(origin.lat * destination.lon + origin.lon * destination.lat) * 10000) % 1

    def estimate(self, origin: Stop, destination: Stop, baseline_minutes: float, distance_km: float) -> float:
        traffic_factor = 0.5 + self.hash_factor(origin, destination) * 0.5
        delay = min(self.max_delay_minutes, (distance_km / 5) * traffic_factor)
        return baseline_minutes + delay


class EstimationStrategy(Protocol):
    def estimate(
        self, origin: Stop, destination: Stop, baseline_minutes: float, distance_km: float
    ) -> Optional[float]: ...


class TrafficEstimator:
    def __init__(
        self,
        speed_cache: TTLCache[SpeedSample],
        time_cache: TTLCache,
        live: EstimationStrategy | None = None,
        fallback: EstimationStrategy | None = None,
    ) -> None:
        self.time_cache = time_cache
        self.live = live or LiveSpeedStrategy(speed_cache)
        self.fallback = fallback or CoordinateHashStrategy()

    def estimate(self, origin: Stop, destination: Stop, baseline_minutes: float, distance_km: float) -> TrafficEstimate:
        key = traffic_time_key(origin.lat, origin.lon, destination.lat, destination.lon)
        cached = self.time_cache.get(key)
        if cached is not None:
            return TrafficEstimate(minutes=cached.minutes, source="cache")

        minutes = self.live.estimate(origin, destination, baseline_minutes, distance_km)
        if minutes is not None:
            estimate = TrafficEstimate(minutes=minutes, source="live")
        else:
            logger.warning(f"Using deterministic traffic estimation for {origin.name} to {destination.name}")
            estimate = TrafficEstimate(
                minutes=self.fallback.estimate(origin, destination, baseline_minutes, distance_km),
                source="fallback",
            )
        self.time_cache.set(key, estimate)
        return estimate
