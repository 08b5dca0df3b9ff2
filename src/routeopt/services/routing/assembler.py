"""Assemble the optimized tour into totals, geometry and instructions."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Stop
from .models import (
    CostMatrix,
    Instruction,
    LatLon,
    OptimizationResult,
    RouteMetrics,
    SegmentSummary,
    WeightConfig,
)
from .optimizer import Matrix, is_complete_tour, leg_cost


def assemble_result(
    stops: Sequence[Stop],
    tour: Sequence[int],
    matrix: Matrix,
    weights: WeightConfig,
) -> OptimizationResult:
    total_distance = 0.0
    total_time = 0.0
    total_cost = 0.0
    geometry: list[LatLon] = []
    instructions: list[Instruction] = []
    segments: list[SegmentSummary] = []

    for a, b in zip(tour, tour[1:]):
        segment = matrix[a][b]
        total_distance += segment.distance_km
        total_time += segment.traffic_minutes
        total_cost += leg_cost(segment, weights)
        geometry.extend(segment.geometry)
        instructions.extend(segment.instructions)
        segments.append(SegmentSummary(distance=segment.distance_km, traffic_time=segment.traffic_minutes))

    visited = set(tour)
    unreached = [stop.name for index, stop in enumerate(stops) if index not in visited]
    diagnostics: dict = {}
    if isinstance(matrix, CostMatrix):
        diagnostics = {
            "failed_pairs": [list(pair) for pair in matrix.failed_pairs],
            "estimate_sources": dict(matrix.estimate_sources),
        }

    return OptimizationResult(
        stops=list(stops),
        tour=list(tour),
        metrics=RouteMetrics(total_distance_km=total_distance, total_time_min=total_time, total_cost=total_cost),
        geometry=geometry,
        instructions=instructions,
        segments=segments,
        degraded=not is_complete_tour(tour, len(stops)) or total_cost == float("inf"),
        unreached=unreached,
        diagnostics=diagnostics,
    )
