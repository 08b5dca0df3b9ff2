"""HTTP client for TomTom traffic flow samples."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

import httpx

from ...config import settings
from ...exceptions import TrafficProviderError
from ...models.domain import SpeedSample
from ..cache import TTLCache, speed_key
from ..routing.models import LatLon

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SpeedFetchReport:
    samples: list[dict] = field(default_factory=list)
    requested: int = 0
    cached: int = 0

    @property
    def failed(self) -> int:
        return self.requested + self.cached - len(self.samples)

    def stats(self, total: int) -> dict[str, int]:
        return {"total": total, "successful": len(self.samples), "failed": self.failed, "cached": self.cached}


class TomTomTrafficClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_parallel_requests: int | None = None,
    ) -> None:
        self.api_key = api_key or settings.tomtom_api_key
        if not self.api_key:
            raise ValueError("TomTom API key is not configured.")
        self.base_url = base_url or settings.tomtom_base_url
        self.timeout = timeout if timeout is not None else settings.tomtom_timeout_seconds
        self.max_parallel_requests = max_parallel_requests or settings.max_parallel_requests

    def flow_segment(self, lat: float, lon: float) -> SpeedSample | None:
        """Return the speed sample nearest to the point, or None when TomTom has no usable data."""
        url = f"{self.base_url}/traffic/services/4/flowSegmentData/absolute/10/json"
        params = {"key": self.api_key, "point": f"{lat},{lon}"}
        try:
            response = httpx.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TrafficProviderError(f"TomTom flow request failed for {lat},{lon}: {exc}") from exc

        flow = data.get("flowSegmentData") if isinstance(data, dict) else None
        if not flow:
            logger.warning(f"No flow segment data for {speed_key(lat, lon)}")
            return None
        try:
            current_speed = float(flow["currentSpeed"])
            free_flow_speed = float(flow["freeFlowSpeed"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Missing speed data for {speed_key(lat, lon)}: {flow}")
            return None
        if not (math.isfinite(current_speed) and math.isfinite(free_flow_speed)):
            logger.warning(f"Invalid speed values for {speed_key(lat, lon)}: {flow}")
            return None
        if not current_speed or not free_flow_speed:
            logger.warning(f"Zero speed values for {speed_key(lat, lon)}: {flow}")
            return None
        return SpeedSample(current_speed=current_speed, free_flow_speed=free_flow_speed)

    def _safe_flow_segment(self, location: LatLon) -> tuple[LatLon, SpeedSample | None]:
        try:
            return location, self.flow_segment(*location)
        except TrafficProviderError as exc:
            logger.error(str(exc))
            return location, None

    def fetch_speed_samples(self, locations: Sequence[LatLon], cache: TTLCache[SpeedSample]) -> SpeedFetchReport:
        """Return a sample for every location that has one, fetching only those missing from ``cache``.

        Cached samples are reported alongside fresh ones; fresh samples are stored in ``cache``.
        """
        unique = list(dict.fromkeys((float(lat), float(lon)) for lat, lon in locations))
        found: dict[LatLon, SpeedSample] = {}
        pending = []
        for location in unique:
            cached_sample = cache.get(speed_key(*location))
            if cached_sample is None:
                pending.append(location)
            else:
                found[location] = cached_sample
        report = SpeedFetchReport(requested=len(pending), cached=len(found))

        if pending:
            with ThreadPoolExecutor(max_workers=min(self.max_parallel_requests, len(pending))) as executor:
                for location, sample in executor.map(self._safe_flow_segment, pending):
                    if sample is None:
                        continue
                    cache.set(speed_key(*location), sample)
                    found[location] = sample

        report.samples = [_sample_payload(location, found[location]) for location in unique if location in found]
        if not report.samples:
            logger.warning("No valid traffic data was fetched for any location")
        else:
            logger.info(
                f"Resolved {len(report.samples)}/{len(unique)} speed samples "
                f"({report.cached} cached, {report.requested} requested)"
            )
        return report


def _sample_payload(location: LatLon, sample: SpeedSample) -> dict:
    lat, lon = location
    return {
        "lat": lat,
        "lon": lon,
        "currentSpeed": sample.current_speed,
        "freeFlowSpeed": sample.free_flow_speed,
    }
