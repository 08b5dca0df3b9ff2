"""Route optimization request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class StopModel(BaseModel):
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class OptimizeRequest(BaseModel):
    stops: List[StopModel] = Field(..., description="Ordered stops; the first one is the depot.")
    use_live_traffic: Optional[bool] = Field(
        default=None,
        description="Fetch live speed samples before optimizing. Defaults to the service setting.",
    )


class RouteStopModel(StopModel):
    index: int


class InstructionModel(BaseModel):
    text: str
    geometry: List[Tuple[float, float]]


class SegmentSummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    distance: Optional[float]
    traffic_time: Optional[float] = Field(..., alias="trafficTime")


class MetricsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_distance: str = Field(..., alias="totalDistance")
    total_time: str = Field(..., alias="totalTime")
    total_cost: str = Field(..., alias="totalCost")
    total_distance_km: Optional[float]
    total_time_min: Optional[float]


class OptimizeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    route: List[RouteStopModel]
    total_cost: Optional[float] = Field(..., alias="totalCost")
    metrics: MetricsModel
    geometry: List[Tuple[float, float]]
    instructions: List[InstructionModel]
    segments: List[SegmentSummaryModel]
    degraded: bool = False
    unreached: List[str] = Field(default_factory=list)
    diagnostics: Dict = Field(default_factory=dict)
