"""Route optimization orchestration service."""

from __future__ import annotations

import logging
import time
from typing import Sequence

from ...config import settings
from ...exceptions import RoutingUnavailableError, TrafficProviderError
from ...models.domain import Stop
from ..cache import RoutingCaches, get_caches
from ..traffic.estimator import TrafficEstimator
from ..traffic.tomtom_client import TomTomTrafficClient
from .assembler import assemble_result
from .matrix import MatrixBuilder
from .models import OptimizationResult, WeightConfig
from .optimizer import RouteOptimizer
from .osrm_client import OSRMClient
from .segment_provider import SegmentProvider

logger = logging.getLogger(__name__)


def default_weights() -> WeightConfig:
    return WeightConfig(distance_weight=settings.distance_weight, traffic_weight=settings.traffic_weight)


def _validate_stops(stops: Sequence[Stop]) -> None:
    if not stops:
        raise ValueError("At least one stop is required.")
    for stop in stops:
        if not (-90.0 <= stop.lat <= 90.0) or not (-180.0 <= stop.lon <= 180.0):
            raise ValueError(f"Invalid coordinates for stop '{stop.name}': {stop.lat},{stop.lon}")


def prefetch_live_traffic(stops: Sequence[Stop], caches: RoutingCaches) -> None:
    """Populate the speed cache for the stops; failures leave the estimator on its fallback."""
    if not settings.tomtom_api_key:
        logger.info("TomTom API key not configured; skipping live traffic fetch")
        return
    try:
        client = TomTomTrafficClient()
        client.fetch_speed_samples([stop.coordinates for stop in stops], caches.traffic_speed)
    except (TrafficProviderError, ValueError) as e:
        logger.error(f"Error fetching traffic data: {e}")


def optimize_stops(
    stops: Sequence[Stop],
    *,
    use_live_traffic: bool | None = None,
    caches: RoutingCaches | None = None,
    weights: WeightConfig | None = None,
) -> OptimizationResult:
    _validate_stops(stops)
    caches = caches or get_caches()
    weights = weights or default_weights()
    use_live_traffic = settings.use_live_traffic if use_live_traffic is None else use_live_traffic

    start_time = time.time()
    if use_live_traffic:
        prefetch_live_traffic(stops, caches)

    try:
        osrm_client = OSRMClient()
    except ValueError as e:
        logger.error(f"OSRM client initialization failed: {e}")
        raise ValueError("OSRM service is not configured. Please check the ROUTEOPT_OSRM_BASE_URL setting.") from e

    builder = MatrixBuilder(
        provider=SegmentProvider(osrm_client, caches.route),
        estimator=TrafficEstimator(caches.traffic_speed, caches.traffic_time),
    )
    matrix = builder.build(stops)

    pair_count = len(stops) * (len(stops) - 1)
    if pair_count and len(matrix.failed_pairs) == pair_count:
        raise RoutingUnavailableError(
            f"Routing provider returned no usable segments for any of the {pair_count} stop pairs."
        )

    plan = RouteOptimizer(weights=weights).optimize(matrix)
    result = assemble_result(stops, plan.tour, matrix, weights)

    if result.degraded:
        logger.warning(
            f"Optimized tour is incomplete or crosses unreachable legs; unreached stops: {result.unreached}"
        )
    logger.info(
        f"Route optimization completed in {time.time() - start_time:.2f}s: "
        f"{len(stops)} stops, total cost {result.metrics.total_cost:.2f}"
    )
    return result
