"""Traffic sample request/response schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LocationModel(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class TrafficDataRequest(BaseModel):
    locations: List[LocationModel] = Field(..., min_length=1)


class TrafficSampleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: float
    lon: float
    current_speed: float = Field(..., alias="currentSpeed")
    free_flow_speed: float = Field(..., alias="freeFlowSpeed")


class TrafficStatsModel(BaseModel):
    total: int
    successful: int
    failed: int
    cached: int = 0


class TrafficDataResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    traffic_data: List[TrafficSampleModel] = Field(..., alias="trafficData")
    stats: TrafficStatsModel
