from __future__ import annotations

from typing import Any, List, Mapping, Optional

from travel_planner.logging import get_logger
from travel_planner.models import Location
from travel_planner.services.weather import OpenMeteoClient

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2


def _to_location(raw: Mapping[str, Any]) -> Location:
    return Location(
        id=raw["id"],
        name=raw["name"],
        country=raw.get("country", ""),
        country_code=raw.get("country_code", ""),
        latitude=raw["latitude"],
        longitude=raw["longitude"],
        timezone=raw.get("timezone", "UTC"),
        population=raw.get("population"),
        admin1=raw.get("admin1"),
    )


class GeocodingService:
    def __init__(self, client: OpenMeteoClient) -> None:
        self.client = client

    def search_cities(self, query: str, count: int = 10) -> List[Location]:
        """Return cities matching ``query``; too-short queries yield an empty list."""

        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        response = self.client.search_cities(query, count)
        results = response.get("results") or []
        logger.info("geocoding.search", query=query, results=len(results))
        return [_to_location(result) for result in results]

    def city_by_coordinates(self, latitude: float, longitude: float) -> Optional[Location]:
        # The geocoding API has no reverse lookup; a "lat,lon" name query is the closest match.
        response = self.client.search_cities(f"{latitude},{longitude}", 1)
        results = response.get("results") or []
        if not results:
            return None
        return _to_location(results[0])
