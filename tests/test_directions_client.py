"""Google Directions client: request building, status handling and retries."""

from __future__ import annotations

from typing import Any, Dict, List

import polyline
import pytest
import requests

from route_painter.config import DIRECTIONS_MAX_RETRIES
from route_painter.directions_client import (
    DirectionsRequest,
    DirectionsResult,
    GoogleDirectionsClient,
    RateLimiter,
    get_directions_with_retry,
    parse_directions_payload,
)
from route_painter.directions_client import client as client_module
from route_painter.directions_client import session as session_module
from route_painter.errors import (
    DirectionsAPIError,
    DirectionsNoRouteError,
    DirectionsRateLimitError,
    DirectionsResponseError,
)
from route_painter.models import LatLng

ORIGIN = LatLng(25.033, 121.5654)
DESTINATION = LatLng(25.04, 121.57)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.url = "https://example.test/directions"

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:
    def __init__(self, responses: List[Any]):
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def ok_payload(*step_points: List[tuple]) -> Dict[str, Any]:
    steps = [{"polyline": {"points": polyline.encode(points)}} for points in step_points]
    return {
        "status": "OK",
        "routes": [
            {
                "legs": [
                    {
                        "distance": {"value": 1234},
                        "duration": {"value": 900},
                        "steps": steps,
                    }
                ]
            }
        ],
    }


def make_client(session: FakeSession, **kwargs) -> GoogleDirectionsClient:
    limiter = RateLimiter(min_interval=0.0, jitter_range=(0.0, 0.0), throttle_seconds=0.0)
    return GoogleDirectionsClient(
        "test-key-1234", session=session, limiter=limiter, **kwargs
    )


def test_parse_payload_joins_steps_without_duplicates():
    payload = ok_payload(
        [(25.0, 121.0), (25.001, 121.0)],
        [(25.001, 121.0), (25.002, 121.001)],
    )
    result = parse_directions_payload(payload)
    assert result.path == [
        LatLng(25.0, 121.0),
        LatLng(25.001, 121.0),
        LatLng(25.002, 121.001),
    ]
    assert result.distance_m == 1234
    assert result.duration_s == 900


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "OK", "routes": []},
        {"status": "OK", "routes": [{"legs": None}]},
        {"status": "OK", "routes": [{"legs": [{"steps": []}]}]},
    ],
)
def test_parse_payload_rejects_missing_geometry(payload):
    with pytest.raises(DirectionsResponseError):
        parse_directions_payload(payload)


def test_route_sends_via_waypoints_and_decodes():
    session = FakeSession([FakeResponse(200, ok_payload([(25.033, 121.5654), (25.04, 121.57)]))])
    client = make_client(session)
    request = DirectionsRequest(
        origin=ORIGIN,
        destination=DESTINATION,
        waypoints=(LatLng(25.035, 121.566),),
        travel_mode="BICYCLING",
    )
    result = client.route(request)
    assert isinstance(result, DirectionsResult)
    assert result.path[0] == pytest.approx(ORIGIN)
    params = session.calls[0]["params"]
    assert params["origin"] == "25.033000,121.565400"
    assert params["destination"] == "25.040000,121.570000"
    assert params["waypoints"] == "via:25.035000,121.566000"
    assert params["mode"] == "bicycling"
    assert params["key"] == "test-key-1234"


def test_optimize_flag_prefixes_waypoints():
    client = make_client(FakeSession([]))
    params = client.build_params(
        DirectionsRequest(ORIGIN, DESTINATION, (ORIGIN,), optimize_waypoints=True)
    )
    assert params["waypoints"].startswith("optimize:true|via:")


def test_invalid_coordinates_rejected_before_request():
    session = FakeSession([])
    client = make_client(session)
    with pytest.raises(ValueError):
        client.route(DirectionsRequest(LatLng(95.0, 0.0), DESTINATION))
    assert session.calls == []


@pytest.mark.parametrize(
    "response, error_type, status",
    [
        (FakeResponse(200, {"status": "OVER_QUERY_LIMIT"}), DirectionsRateLimitError, "OVER_QUERY_LIMIT"),
        (FakeResponse(200, {"status": "ZERO_RESULTS"}), DirectionsNoRouteError, "ZERO_RESULTS"),
        (FakeResponse(200, {"status": "REQUEST_DENIED", "error_message": "bad key"}), DirectionsAPIError, "REQUEST_DENIED"),
        (FakeResponse(429, {"status": "OVER_QUERY_LIMIT"}), DirectionsRateLimitError, "HTTP_429"),
        (FakeResponse(403, None, text="Forbidden"), DirectionsAPIError, "HTTP_403"),
        (FakeResponse(200, None, text="<html>"), DirectionsResponseError, "INVALID_RESPONSE"),
        (FakeResponse(200, ["not", "a", "dict"]), DirectionsResponseError, "INVALID_RESPONSE"),
    ],
)
def test_route_status_classification(response, error_type, status):
    client = make_client(FakeSession([response]))
    with pytest.raises(error_type) as excinfo:
        client.route(DirectionsRequest(ORIGIN, DESTINATION))
    assert excinfo.value.status == status
    # Every outcome releases its limiter slot.
    assert client.limiter.snapshot()["in_flight"] == 0


def test_missing_api_key():
    client = GoogleDirectionsClient("", session=FakeSession([]))
    with pytest.raises(DirectionsAPIError, match="GOOGLE_MAPS_API_KEY"):
        client.route(DirectionsRequest(ORIGIN, DESTINATION))


def test_network_errors_retried_then_raised(monkeypatch):
    waits: List[float] = []
    monkeypatch.setattr(client_module, "sleep_or_cancel", lambda s, token=None: waits.append(s))
    session = FakeSession([requests.ConnectionError("boom"), requests.Timeout("slow")])
    client = make_client(session, max_network_retries=2)
    with pytest.raises(DirectionsAPIError) as excinfo:
        client.route(DirectionsRequest(ORIGIN, DESTINATION))
    assert excinfo.value.status == "NETWORK_ERROR"
    assert len(session.calls) == 2
    assert waits == [1.0]


def test_network_error_then_success(monkeypatch):
    monkeypatch.setattr(client_module, "sleep_or_cancel", lambda s, token=None: None)
    session = FakeSession(
        [requests.ConnectionError("boom"), FakeResponse(200, ok_payload([(25.0, 121.0), (25.1, 121.0)]))]
    )
    result = make_client(session).route(DirectionsRequest(ORIGIN, DESTINATION))
    assert len(result.path) == 2


class FlakyProvider:
    def __init__(self, failures: int, error: Exception):
        self.failures = failures
        self.error = error
        self.calls = 0

    def route(self, request, *, cancel_token=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return DirectionsResult(path=[request.origin, request.destination], distance_m=1.0, duration_s=1.0)


def test_retry_backs_off_on_rate_limits(monkeypatch):
    waits: List[float] = []
    monkeypatch.setattr(client_module, "sleep_or_cancel", lambda s, token=None: waits.append(s))
    provider = FlakyProvider(2, DirectionsRateLimitError("slow down", status="OVER_QUERY_LIMIT"))
    result = get_directions_with_retry(provider, DirectionsRequest(ORIGIN, DESTINATION), max_retries=3)
    assert result.path == [ORIGIN, DESTINATION]
    assert waits == [1.0, 2.0]


def test_retry_gives_up_after_max_attempts(monkeypatch):
    monkeypatch.setattr(client_module, "sleep_or_cancel", lambda s, token=None: None)
    provider = FlakyProvider(5, DirectionsRateLimitError("slow down", status="OVER_QUERY_LIMIT"))
    with pytest.raises(DirectionsRateLimitError):
        get_directions_with_retry(provider, DirectionsRequest(ORIGIN, DESTINATION), max_retries=3)
    assert provider.calls == 3


def test_retry_does_not_repeat_other_errors():
    provider = FlakyProvider(1, DirectionsNoRouteError("nothing", status="ZERO_RESULTS"))
    with pytest.raises(DirectionsNoRouteError):
        get_directions_with_retry(provider, DirectionsRequest(ORIGIN, DESTINATION))
    assert provider.calls == 1


def test_session_retries_server_errors_but_not_rate_limits():
    session = session_module.create_default_session()
    retry = session.get_adapter("https://maps.googleapis.com").max_retries
    assert retry.total == DIRECTIONS_MAX_RETRIES
    assert 429 not in retry.status_forcelist
    assert set(retry.status_forcelist) == {500, 502, 503, 504}
    assert list(retry.allowed_methods) == ["GET"]
    assert session.headers["User-Agent"].startswith("route-painter/")


def test_default_session_is_shared_until_reset():
    first = session_module.get_default_session()
    assert session_module.get_default_session() is first
    session_module.reset_default_session()
    assert session_module.get_default_session() is not first
