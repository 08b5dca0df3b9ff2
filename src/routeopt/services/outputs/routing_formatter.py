"""Serializers for optimization results."""

from __future__ import annotations

import math
from typing import Optional

from ...schemas.tsp import (
    InstructionModel,
    MetricsModel,
    OptimizeResponse,
    RouteStopModel,
    SegmentSummaryModel,
)
from ..routing.models import OptimizationResult


def _finite(value: float, digits: int | None = None) -> Optional[float]:
    # JSON has no infinity; unreachable legs are reported as null
    if not math.isfinite(value):
        return None
    return round(value, digits) if digits is not None else value


def optimization_result_to_response(result: OptimizationResult) -> OptimizeResponse:
    metrics = result.metrics
    formatted = metrics.formatted
    return OptimizeResponse(
        route=[
            RouteStopModel(name=result.stops[index].name, lat=result.stops[index].lat, lon=result.stops[index].lon, index=index)
            for index in result.tour
        ],
        total_cost=_finite(metrics.total_cost, 2),
        metrics=MetricsModel(
            total_distance=formatted["totalDistance"],
            total_time=formatted["totalTime"],
            total_cost=formatted["totalCost"],
            total_distance_km=_finite(metrics.total_distance_km),
            total_time_min=_finite(metrics.total_time_min),
        ),
        geometry=result.geometry,
        instructions=[
            InstructionModel(text=instruction.text, geometry=instruction.geometry)
            for instruction in result.instructions
        ],
        segments=[
            SegmentSummaryModel(distance=_finite(segment.distance), traffic_time=_finite(segment.traffic_time))
            for segment in result.segments
        ],
        degraded=result.degraded,
        unreached=result.unreached,
        diagnostics=result.diagnostics,
    )
