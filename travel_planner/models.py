from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

SUITABLE_THRESHOLD = 60


@dataclass(frozen=True)
class Location:
    """A place a forecast can be requested for, as returned by geocoding."""

    id: int
    name: str
    country: str
    country_code: str
    latitude: float
    longitude: float
    timezone: str
    population: Optional[int] = None
    admin1: Optional[str] = None

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float, timezone: str) -> "Location":
        """Placeholder location for callers that supply raw coordinates."""
        return cls(
            id=0,
            name=f"{latitude:.4f}, {longitude:.4f}",
            country="Unknown",
            country_code="",
            latitude=latitude,
            longitude=longitude,
            timezone=timezone,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "country_code": self.country_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "population": self.population,
            "admin1": self.admin1,
        }


@dataclass(frozen=True)
class HourlyRecord:
    """One hour of forecast data in metric units (°C, km/h, mm).

    ``snow_depth`` is in centimetres, not the metres Open-Meteo reports; the
    normalizer converts it, so records built by hand must do the same. It is
    ``None`` when the provider did not report it, which is not the same as a
    reported depth of zero.
    """

    time: str
    temperature: float
    wind_speed: float
    precipitation: float
    weather_code: int
    snow_depth: Optional[float] = None

    @property
    def is_clear(self) -> bool:
        # Codes 0-3 run from clear sky to overcast; anything above is weather.
        return self.weather_code <= 3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "temperature": self.temperature,
            "wind_speed": self.wind_speed,
            "precipitation": self.precipitation,
            "weather_code": self.weather_code,
            "snow_depth": self.snow_depth,
        }


@dataclass(frozen=True)
class DailyRecord:
    date: str
    temperature_max: float
    temperature_min: float
    precipitation_sum: float
    wind_speed_max: float
    weather_code: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "temperature_max": self.temperature_max,
            "temperature_min": self.temperature_min,
            "precipitation_sum": self.precipitation_sum,
            "wind_speed_max": self.wind_speed_max,
            "weather_code": self.weather_code,
        }


@dataclass(frozen=True)
class NormalizedForecast:
    """Provider-agnostic forecast; ``hourly`` is in chronological order."""

    location: Location
    timezone: str
    current: HourlyRecord
    hourly: Tuple[HourlyRecord, ...] = ()
    daily: Tuple[DailyRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location.to_dict(),
            "timezone": self.timezone,
            "current": self.current.to_dict(),
            "hourly": [record.to_dict() for record in self.hourly],
            "daily": [record.to_dict() for record in self.daily],
        }


class ActivityType(str, Enum):
    SKIING = "SKIING"
    SURFING = "SURFING"
    INDOOR_SIGHTSEEING = "INDOOR_SIGHTSEEING"
    OUTDOOR_SIGHTSEEING = "OUTDOOR_SIGHTSEEING"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class ActivityScore:
    type: ActivityType
    name: str
    score: int
    suitable: bool
    reason: str

    @classmethod
    def from_reasons(cls, activity: ActivityType, score: int, reasons: Sequence[str]) -> "ActivityScore":
        return cls(
            type=activity,
            name=activity.display_name,
            score=score,
            suitable=score >= SUITABLE_THRESHOLD,
            reason="; ".join(reasons),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "score": self.score,
            "suitable": self.suitable,
            "reason": self.reason,
        }


@dataclass
class ActivityRanking:
    location: Location
    forecast: NormalizedForecast
    activities: List[ActivityScore]
    ranked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location.to_dict(),
            "forecast": self.forecast.to_dict(),
            "activities": [activity.to_dict() for activity in self.activities],
            "ranked_at": self.ranked_at.isoformat(),
        }
