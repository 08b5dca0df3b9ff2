"""Routing domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from ...models.domain import Stop

LatLon = tuple[float, float]

# Shown in place of a total that crosses an unreachable leg
UNREACHABLE_TOTAL = "unreachable"


@dataclass(frozen=True, slots=True)
class WeightConfig:
    """Weights applied to distance (km) and traffic time (minutes) when scoring legs."""

    distance_weight: float = 0.4
    traffic_weight: float = 0.6

    def cost(self, distance_km: float, traffic_minutes: float) -> float:
        return self.distance_weight * distance_km + self.traffic_weight * traffic_minutes


@dataclass(slots=True)
class Instruction:
    text: str
    geometry: List[LatLon] = field(default_factory=list)


@dataclass(slots=True)
class RouteLeg:
    """Raw provider output for one directed stop pair, before traffic adjustment."""

    distance_km: float
    duration_minutes: float
    geometry: List[LatLon]
    instructions: List[Instruction]


@dataclass(slots=True)
class Segment:
    """One cell of the cost matrix."""

    distance_km: float
    traffic_minutes: float
    geometry: List[LatLon] = field(default_factory=list)
    instructions: List[Instruction] = field(default_factory=list)

    @classmethod
    def identity(cls) -> "Segment":
        return cls(distance_km=0.0, traffic_minutes=0.0)

    @classmethod
    def unreachable(cls) -> "Segment":
        return cls(distance_km=math.inf, traffic_minutes=math.inf)

    @property
    def is_reachable(self) -> bool:
        return math.isfinite(self.distance_km) and math.isfinite(self.traffic_minutes)


@dataclass(slots=True)
class CostMatrix:
    cells: List[List[Segment]]
    failed_pairs: List[tuple[int, int]] = field(default_factory=list)
    # Counts of traffic estimates by source: "cache", "live", "fallback".
    estimate_sources: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> List[Segment]:
        return self.cells[index]


@dataclass(slots=True)
class TourPlan:
    tour: List[int]
    score: float
    complete: bool


@dataclass(slots=True)
class SegmentSummary:
    distance: float
    traffic_time: float


@dataclass(slots=True)
class RouteMetrics:
    total_distance_km: float
    total_time_min: float
    total_cost: float

    @property
    def formatted(self) -> dict[str, str]:
        return {
            "totalDistance": _format_total(self.total_distance_km, " km"),
            "totalTime": _format_total(self.total_time_min, " minutes"),
            "totalCost": _format_total(self.total_cost),
        }


def _format_total(value: float, unit: str = "") -> str:
    if not math.isfinite(value):
        return UNREACHABLE_TOTAL
    return f"{value:.2f}{unit}"


@dataclass(slots=True)
class OptimizationResult:
    stops: List[Stop]
    tour: List[int]
    metrics: RouteMetrics
    geometry: List[LatLon]
    instructions: List[Instruction]
    segments: List[SegmentSummary]
    degraded: bool = False
    unreached: List[str] = field(default_factory=list)
    diagnostics: dict = field(default_factory=dict)

    @property
    def route(self) -> List[Stop]:
        return [self.stops[index] for index in self.tour]
