"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...services.cache import get_caches

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    """Check OSRM service health."""
    osrm_health_check = _get_osrm_health_check()
    return {"service": "osrm", "healthy": osrm_health_check()}


@router.get("/health/cache", status_code=status.HTTP_200_OK)
def health_cache() -> dict:
    """Report how many entries each cache currently holds (expired entries included until read)."""
    return {"service": "cache", "sizes": get_caches().sizes()}
