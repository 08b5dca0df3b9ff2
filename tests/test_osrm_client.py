import httpx
import pytest

from conftest import osrm_payload
from routeopt.config import settings
from routeopt.services.routing import osrm_client as osrm_module
from routeopt.services.routing.osrm_client import OSRMClient, check_health

ORIGIN = (41.0, 28.7)
DESTINATION = (41.01, 28.71)


def _client_with(monkeypatch: pytest.MonkeyPatch, responses, max_retries: int = 2) -> tuple[OSRMClient, list]:
    """Build a client whose transport replays ``responses`` in order.

    Each item is a status code, a JSON payload (served with 200) or an exception class to raise.
    """
    client = OSRMClient(base_url="http://osrm.test", profile="driving", max_retries=max_retries, backoff_seconds=0)
    requests = []
    remaining = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        item = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(item, type) and issubclass(item, Exception):
            raise item("boom", request=request)
        if isinstance(item, int):
            return httpx.Response(item, json={"message": "error"})
        return httpx.Response(200, json=item)

    monkeypatch.setattr(client, "_get_client", lambda: httpx.Client(transport=httpx.MockTransport(handler)))
    return client, requests


def test_requires_base_url(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "osrm_base_url", None)

    with pytest.raises(ValueError):
        OSRMClient()


def test_route_requests_lon_lat_pairs_with_steps(monkeypatch):
    client, requests = _client_with(monkeypatch, [osrm_payload(1000, 60)])

    data = client.route(ORIGIN, DESTINATION)

    assert data["routes"][0]["distance"] == 1000
    assert len(requests) == 1
    assert requests[0].url.path == "/route/v1/driving/28.7,41.0;28.71,41.01"
    assert requests[0].url.params["steps"] == "true"
    assert requests[0].url.params["geometries"] == "geojson"
    assert requests[0].url.params["overview"] == "full"


@pytest.mark.parametrize("status_code", [429, 500, 503])
def test_retryable_status_is_retried(monkeypatch, status_code):
    client, requests = _client_with(monkeypatch, [status_code, osrm_payload(1000, 60)])

    data = client.route(ORIGIN, DESTINATION)

    assert data["code"] == "Ok"
    assert len(requests) == 2


def test_client_error_is_not_retried(monkeypatch):
    client, requests = _client_with(monkeypatch, [404, osrm_payload(1000, 60)])

    with pytest.raises(httpx.HTTPStatusError):
        client.route(ORIGIN, DESTINATION)
    assert len(requests) == 1


def test_server_error_gives_up_after_max_retries(monkeypatch):
    client, requests = _client_with(monkeypatch, [500], max_retries=2)

    with pytest.raises(httpx.HTTPStatusError):
        client.route(ORIGIN, DESTINATION)
    assert len(requests) == 3


def test_non_ok_code_raises_value_error(monkeypatch):
    client, requests = _client_with(monkeypatch, [{"code": "NoRoute", "message": "Impossible route"}])

    with pytest.raises(ValueError, match="Impossible route"):
        client.route(ORIGIN, DESTINATION)
    assert len(requests) == 1


def test_empty_routes_raise_value_error(monkeypatch):
    client, _ = _client_with(monkeypatch, [{"code": "Ok", "routes": []}])

    with pytest.raises(ValueError, match="No routes"):
        client.route(ORIGIN, DESTINATION)


def test_connect_error_becomes_connection_error_after_retries(monkeypatch):
    client, requests = _client_with(monkeypatch, [httpx.ConnectError], max_retries=1)

    with pytest.raises(ConnectionError):
        client.route(ORIGIN, DESTINATION)
    assert len(requests) == 2


def test_transient_connect_error_recovers(monkeypatch):
    client, requests = _client_with(monkeypatch, [httpx.ConnectError, osrm_payload(500, 30)])

    data = client.route(ORIGIN, DESTINATION)

    assert data["routes"][0]["duration"] == 30
    assert len(requests) == 2


def test_timeout_is_raised_after_retries(monkeypatch):
    client, requests = _client_with(monkeypatch, [httpx.ReadTimeout], max_retries=2)

    with pytest.raises(httpx.TimeoutException):
        client.route(ORIGIN, DESTINATION)
    assert len(requests) == 3


def test_check_health_reports_ok_route(monkeypatch):
    def _get(url, params=None, timeout=None):
        return httpx.Response(200, json={"code": "Ok"}, request=httpx.Request("GET", url))

    monkeypatch.setattr(osrm_module.httpx, "get", _get)

    assert check_health("http://osrm.test") is True


def test_check_health_is_false_when_unreachable(monkeypatch):
    def _get(url, params=None, timeout=None):
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(osrm_module.httpx, "get", _get)

    assert check_health("http://osrm.test") is False


def test_check_health_without_base_url(monkeypatch):
    monkeypatch.setattr(settings, "osrm_base_url", None)

    assert check_health() is False
