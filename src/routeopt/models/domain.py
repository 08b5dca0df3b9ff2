"""Domain models for stops and live traffic samples."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Stop:
    """A location to visit, identified by name and coordinates."""

    name: str
    lat: float
    lon: float

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.lat, self.lon)


@dataclass(frozen=True, slots=True)
class SpeedSample:
    """Current and free-flow speed (km/h) observed near a coordinate."""

    current_speed: float
    free_flow_speed: float
