"""Cache-backed road segment lookups between two stops."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from ...exceptions import SegmentProviderError
from ...models.domain import Stop
from ..cache import TTLCache, route_key
from .instructions import DEFAULT_INSTRUCTION, compile_instruction
from .models import Instruction, LatLon, RouteLeg

logger = logging.getLogger(__name__)


class RouteClient(Protocol):
    def route(self, origin: LatLon, destination: LatLon) -> dict: ...


def _to_lat_lon(coordinates: Any) -> list[LatLon]:
    # GeoJSON positions are [lon, lat]
    return [(float(lat), float(lon)) for lon, lat in (coordinates or [])]


def parse_route_response(data: dict) -> RouteLeg:
    """Convert an OSRM route payload into a :class:`RouteLeg` (km, minutes, lat/lon)."""
    try:
        route = data["routes"][0]
        distance_km = float(route["distance"]) / 1000.0
        duration_minutes = float(route["duration"]) / 60.0
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise SegmentProviderError(f"Malformed OSRM route response: {exc}") from exc

    geometry = _to_lat_lon((route.get("geometry") or {}).get("coordinates"))
    legs = route.get("legs") or [{}]
    instructions = [
        Instruction(
            text=compile_instruction(step) or DEFAULT_INSTRUCTION,
            geometry=_to_lat_lon((step.get("geometry") or {}).get("coordinates")),
        )
        for step in legs[0].get("steps") or []
    ]
    return RouteLeg(
        distance_km=distance_km,
        duration_minutes=duration_minutes,
        geometry=geometry,
        instructions=instructions,
    )


class SegmentProvider:
    """Fetch the road distance, duration and turn geometry for a directed stop pair."""

    def __init__(self, client: RouteClient, cache: TTLCache) -> None:
        self.client = client
        self.cache = cache

    def fetch(self, origin: Stop, destination: Stop) -> RouteLeg:
        key = route_key(origin.lat, origin.lon, destination.lat, destination.lon)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for route: {key}")
            return cached

        try:
            data = self.client.route(origin.coordinates, destination.coordinates)
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            raise SegmentProviderError(
                f"Routing provider failed for {origin.name} -> {destination.name}: {exc}"
            ) from exc

        leg = parse_route_response(data)
        self.cache.set(key, leg)
        return leg
