from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from travel_planner.config import OpenMeteoConfig
from travel_planner.http_client import HttpFetcher, ProviderError
from travel_planner.models import Location
from travel_planner.normalization import DataShapeError
from travel_planner.services.geocoding import GeocodingService
from travel_planner.services.weather import OpenMeteoClient, WeatherService

FIXTURES = Path(__file__).parent / "fixtures"
PAYLOAD = json.loads((FIXTURES / "open_meteo_forecast.json").read_text(encoding="utf-8"))

CONFIG = OpenMeteoConfig(
    forecast_url="https://forecast.test/v1",
    geocoding_url="https://geocoding.test/v1/",
    max_attempts=2,
    backoff_factor=0,
)

BERLIN = {
    "id": 2950159,
    "name": "Berlin",
    "latitude": 52.52437,
    "longitude": 13.41053,
    "country": "Germany",
    "country_code": "DE",
    "timezone": "Europe/Berlin",
    "population": 3426354,
    "admin1": "Land Berlin",
}


def _make_client(handler: Callable[[httpx.Request], httpx.Response]) -> OpenMeteoClient:
    fetcher = HttpFetcher(httpx.Client(transport=httpx.MockTransport(handler)), max_attempts=2, backoff_factor=0)
    return OpenMeteoClient(fetcher, config=CONFIG)


def test_forecast_request_parameters() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=PAYLOAD)

    client = _make_client(handler)
    client.get_forecast_payload(-33.9258, 18.4232, "Africa/Johannesburg")

    request = requests[0]
    assert request.url.host == "forecast.test"
    assert request.url.path == "/v1/forecast"
    params = request.url.params
    assert params["latitude"] == "-33.9258"
    assert params["timezone"] == "Africa/Johannesburg"
    assert "snow_depth" in params["hourly"].split(",")
    assert params["daily"].split(",")[0] == "temperature_2m_max"
    assert params["forecast_days"] == "7"


def test_weather_service_normalizes_payload() -> None:
    client = _make_client(lambda _: httpx.Response(200, json=PAYLOAD))
    location = Location.from_coordinates(-33.9258, 18.4232, "Africa/Johannesburg")

    forecast = WeatherService(client).get_forecast(location)

    assert forecast.location is location
    assert forecast.current.temperature == 24.5
    assert len(forecast.hourly) == 2
    assert len(forecast.daily) == 2


def test_weather_service_surfaces_malformed_payload() -> None:
    broken = {**PAYLOAD, "hourly": {**PAYLOAD["hourly"], "precipitation": [0.0]}}
    client = _make_client(lambda _: httpx.Response(200, json=broken))

    with pytest.raises(DataShapeError):
        WeatherService(client).get_forecast(Location.from_coordinates(0, 0, "UTC"))


def test_http_error_becomes_provider_error_with_reason() -> None:
    client = _make_client(
        lambda _: httpx.Response(400, json={"error": True, "reason": "Latitude must be in range of -90 to 90°."})
    )

    with pytest.raises(ProviderError) as excinfo:
        client.get_forecast_payload(120, 0, "UTC")

    assert excinfo.value.status_code == 400
    assert str(excinfo.value) == "Weather forecast fetch failed: [400] Latitude must be in range of -90 to 90°."


def test_transport_errors_are_retried_then_wrapped() -> None:
    attempts = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    client = _make_client(handler)

    with pytest.raises(ProviderError) as excinfo:
        client.get_forecast_payload(0, 0, "UTC")
    assert attempts["count"] == 2
    assert excinfo.value.status_code is None
    assert str(excinfo.value) == "Weather forecast fetch failed: connection refused"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_non_json_body_becomes_provider_error() -> None:
    client = _make_client(lambda _: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(ProviderError) as excinfo:
        client.search_cities("Berlin")

    assert str(excinfo.value) == "Geocoding search failed: invalid JSON"
    assert excinfo.value.status_code == 200


def test_transport_error_recovers_on_retry() -> None:
    attempts = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json=PAYLOAD)

    payload = _make_client(handler).get_forecast_payload(0, 0, "UTC")

    assert payload["timezone"] == "Africa/Johannesburg"
    assert attempts["count"] == 2


def test_search_cities_maps_results() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"results": [BERLIN], "generationtime_ms": 0.5})

    cities = GeocodingService(_make_client(handler)).search_cities("  Berlin ", count=5)

    assert requests[0].url.path == "/v1/search"
    assert requests[0].url.params["name"] == "Berlin"
    assert requests[0].url.params["count"] == "5"
    assert len(cities) == 1
    city = cities[0]
    assert city.name == "Berlin"
    assert city.country_code == "DE"
    assert city.timezone == "Europe/Berlin"
    assert city.admin1 == "Land Berlin"


@pytest.mark.parametrize("query", ["", " ", "B", " x "])
def test_short_queries_skip_the_provider(query: str) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert GeocodingService(_make_client(handler)).search_cities(query) == []


def test_search_without_results_returns_empty_list() -> None:
    client = _make_client(lambda _: httpx.Response(200, json={"generationtime_ms": 0.3}))

    assert GeocodingService(client).search_cities("Nowhereville") == []


def test_city_by_coordinates() -> None:
    client = _make_client(lambda _: httpx.Response(200, json={"results": [BERLIN]}))
    empty = _make_client(lambda _: httpx.Response(200, json={}))

    assert GeocodingService(client).city_by_coordinates(52.52, 13.41).id == 2950159
    assert GeocodingService(empty).city_by_coordinates(0, 0) is None
