"""Live traffic sample endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.traffic import TrafficDataRequest, TrafficDataResponse
from ...services.cache import get_caches
from ...services.traffic.tomtom_client import TomTomTrafficClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/traffic", tags=["traffic"])


@router.post("/data", response_model=TrafficDataResponse, status_code=status.HTTP_200_OK)
def traffic_data(payload: TrafficDataRequest) -> TrafficDataResponse:
    """Fetch live speed samples for the locations and store them in the shared speed cache."""
    try:
        client = TomTomTrafficClient()
    except ValueError as exc:
        logger.error(f"TomTom client initialization failed: {exc}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="API key not configured") from exc

    locations = [(location.lat, location.lon) for location in payload.locations]
    report = client.fetch_speed_samples(locations, get_caches().traffic_speed)
    return TrafficDataResponse(
        traffic_data=report.samples,
        stats=report.stats(total=len(locations)),
    )
