from __future__ import annotations

from typing import Any, Dict, Optional

from travel_planner.config import OpenMeteoConfig, app_config
from travel_planner.http_client import HttpFetcher
from travel_planner.logging import get_logger
from travel_planner.models import Location, NormalizedForecast
from travel_planner.normalization import DEFAULT_NORMALIZER, ForecastNormalizer

logger = get_logger(__name__)

CURRENT_VARIABLES = ("temperature_2m", "windspeed_10m", "precipitation", "weathercode")
HOURLY_VARIABLES = CURRENT_VARIABLES + ("snow_depth",)
DAILY_VARIABLES = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "windspeed_10m_max",
    "weathercode",
)


class OpenMeteoClient:
    """Thin wrapper around the Open-Meteo forecast and geocoding APIs.

    Returns the raw provider payloads; mapping them into domain objects is
    left to the services.
    """

    def __init__(self, fetcher: Optional[HttpFetcher] = None, *, config: Optional[OpenMeteoConfig] = None) -> None:
        self.config = config or app_config.open_meteo
        self.fetcher = fetcher or HttpFetcher.from_config(self.config)

    def get_forecast_payload(self, latitude: float, longitude: float, timezone: str) -> Dict[str, Any]:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone,
            "current": ",".join(CURRENT_VARIABLES),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "forecast_days": self.config.forecast_days,
            "format": "json",
        }
        return self.fetcher.fetch_json(
            f"{self.config.forecast_url.rstrip('/')}/forecast",
            params=params,
            context="Weather forecast fetch failed",
        )

    def search_cities(self, query: str, count: int = 10, language: str = "en") -> Dict[str, Any]:
        params = {"name": query, "count": count, "language": language, "format": "json"}
        return self.fetcher.fetch_json(
            f"{self.config.geocoding_url.rstrip('/')}/search",
            params=params,
            context="Geocoding search failed",
        )


class WeatherService:
    def __init__(self, client: OpenMeteoClient, normalizer: ForecastNormalizer = DEFAULT_NORMALIZER) -> None:
        self.client = client
        self.normalizer = normalizer

    def get_forecast(self, location: Location) -> NormalizedForecast:
        payload = self.client.get_forecast_payload(location.latitude, location.longitude, location.timezone)
        forecast = self.normalizer.normalize(payload, location)
        logger.info(
            "weather.forecast",
            location=location.name,
            timezone=forecast.timezone,
            hours=len(forecast.hourly),
            days=len(forecast.daily),
        )
        return forecast
