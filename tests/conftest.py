import threading

import httpx
import pytest

from routeopt.config import settings
from routeopt.services.cache import RoutingCaches, get_caches


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def osrm_payload(distance_m: float, duration_s: float, coordinates=None, steps=None) -> dict:
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": distance_m,
                "duration": duration_s,
                "geometry": {"type": "LineString", "coordinates": coordinates or []},
                "legs": [{"steps": steps or []}],
            }
        ],
    }


class DummyOSRM:
    """Routes every pair with a distance proportional to the coordinate difference.

    Pairs listed in ``failing`` (as ((lat, lon), (lat, lon))) raise a connection error.
    """

    def __init__(self, failing=(), fail_all: bool = False) -> None:
        self.failing = set(failing)
        self.fail_all = fail_all
        self.calls = 0
        self._lock = threading.Lock()

    def route(self, origin, destination):
        with self._lock:
            self.calls += 1
        if self.fail_all or (tuple(origin), tuple(destination)) in self.failing:
            raise httpx.ConnectError("connection refused")
        distance_m = (abs(origin[0] - destination[0]) + abs(origin[1] - destination[1])) * 100_000
        return osrm_payload(
            distance_m=distance_m,
            duration_s=distance_m / 10,
            coordinates=[[origin[1], origin[0]], [destination[1], destination[0]]],
            steps=[
                {"maneuver": {"type": "depart", "bearing_after": 90}, "name": "Depot Road",
                 "geometry": {"coordinates": [[origin[1], origin[0]]]}},
                {"maneuver": {"type": "arrive"}, "name": "",
                 "geometry": {"coordinates": [[destination[1], destination[0]]]}},
            ],
        )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caches(fake_clock: FakeClock) -> RoutingCaches:
    return RoutingCaches.from_settings(clock=fake_clock)


@pytest.fixture(autouse=True)
def clear_shared_caches():
    get_caches.cache_clear()
    yield
    get_caches.cache_clear()


@pytest.fixture(autouse=True)
def no_live_traffic(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "tomtom_api_key", None)
