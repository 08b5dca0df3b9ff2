"""Route optimization endpoints."""

from __future__ import annotations

import logging
from typing import Sequence

from fastapi import APIRouter, HTTPException, status

from ...data.default_stops import get_default_stops
from ...exceptions import RoutingUnavailableError
from ...models.domain import Stop
from ...schemas.tsp import OptimizeRequest, OptimizeResponse
from ...services.cache import get_caches
from ...services.outputs.routing_formatter import optimization_result_to_response
from ...services.routing.service import optimize_stops

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tsp", tags=["tsp"])


def _run_optimization(stops: Sequence[Stop], use_live_traffic: bool | None = None) -> OptimizeResponse:
    try:
        result = optimize_stops(stops, use_live_traffic=use_live_traffic)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RoutingUnavailableError as exc:
        logger.error(f"Routing provider unavailable: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"TSP optimization failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Route optimization failed: {str(exc)}",
        ) from exc
    return optimization_result_to_response(result)


@router.get("", response_model=OptimizeResponse, status_code=status.HTTP_200_OK)
def optimize_default() -> OptimizeResponse:
    """Optimize the built-in stop list."""
    return _run_optimization(get_default_stops())


@router.post("/optimize", response_model=OptimizeResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest) -> OptimizeResponse:
    stops = [Stop(name=stop.name, lat=stop.lat, lon=stop.lon) for stop in payload.stops]
    return _run_optimization(stops, use_live_traffic=payload.use_live_traffic)


@router.delete("/cache", status_code=status.HTTP_200_OK)
def clear_cache() -> dict:
    caches = get_caches()
    cleared = caches.sizes()
    caches.clear()
    return {"success": True, "cleared": cleared}
