"""Built-in stop list served when no stops are supplied."""

from __future__ import annotations

from ..models.domain import Stop

DEFAULT_STOPS: tuple[Stop, ...] = (
    Stop(name="Cennet Sube", lat=40.994600, lon=28.775300),
    Stop(name="Location-1", lat=41.0017377265273, lon=28.776208912671674),
    Stop(name="Location-2", lat=41.004619767643526, lon=28.78322280363494),
    Stop(name="Location-3", lat=41.00037372414711, lon=28.792933878928125),
    Stop(name="Location-4", lat=40.99140157967791, lon=28.798549052894398),
    Stop(name="Location-5", lat=41.0119826818897, lon=28.788525037442994),
    Stop(name="Location-6", lat=40.97668849083287, lon=28.79445239031416),
    Stop(name="Location-7", lat=41.00274090266056, lon=28.817164223670922),
)


def get_default_stops() -> list[Stop]:
    return list(DEFAULT_STOPS)
