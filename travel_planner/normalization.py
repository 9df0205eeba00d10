from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .models import DailyRecord, HourlyRecord, Location, NormalizedForecast

Converter = Callable[[Any], Any]


class DataShapeError(ValueError):
    """Raised when a provider payload does not have the expected shape."""

    def __init__(self, section: str, field: str, message: str) -> None:
        super().__init__(f"{section}.{field}: {message}")
        self.section = section
        self.field = field


def _metres_to_centimetres(value: Any) -> float:
    return float(value) * 100.0


def _weather_code(value: Any) -> int:
    code = float(value)
    if not code.is_integer():
        raise ValueError(f"weather code {value!r} is not a whole number")
    return int(code)


@dataclass(frozen=True)
class FieldMapping:
    """Describes where a normalized field lives in the provider payload."""

    source: str
    converter: Converter = float
    required: bool = True

    def convert(self, section: str, value: Any) -> Any:
        if value is None:
            if self.required:
                raise DataShapeError(section, self.source, "value is null")
            return None
        try:
            return self.converter(value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise DataShapeError(section, self.source, f"cannot convert {value!r}") from exc

    def extract(self, section: str, payload: Mapping[str, Any]) -> Any:
        if self.source not in payload:
            if self.required:
                raise DataShapeError(section, self.source, "missing field")
            return None
        return self.convert(section, payload[self.source])

    def column(self, section: str, payload: Mapping[str, Any]) -> Optional[Sequence[Any]]:
        values = payload.get(self.source)
        if values is None:
            if self.required:
                raise DataShapeError(section, self.source, "missing field")
            return None
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise DataShapeError(section, self.source, "expected an array")
        return values


class ForecastNormalizer:
    """Turns column-oriented provider payloads into a :class:`NormalizedForecast`.

    Each section (``current``, ``hourly``, ``daily``) has its own mapping of
    normalized field name to :class:`FieldMapping`. Hourly and daily sections
    are parallel arrays aligned on ``time_field``; row ``i`` of every column
    describes the same timestamp.
    """

    def __init__(
        self,
        *,
        current: Mapping[str, FieldMapping],
        hourly: Mapping[str, FieldMapping],
        daily: Mapping[str, FieldMapping],
        time_field: str = "time",
    ) -> None:
        self._current: Dict[str, FieldMapping] = dict(current)
        self._hourly: Dict[str, FieldMapping] = dict(hourly)
        self._daily: Dict[str, FieldMapping] = dict(daily)
        self._time = FieldMapping(time_field, converter=str)

    @staticmethod
    def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
        section = payload.get(name)
        if not isinstance(section, Mapping):
            raise DataShapeError(name, "*", "missing section")
        return section

    def _rows(
        self, name: str, section: Mapping[str, Any], mappings: Mapping[str, FieldMapping]
    ) -> List[Dict[str, Any]]:
        times = self._time.column(name, section)
        columns = {field: (spec, spec.column(name, section)) for field, spec in mappings.items()}

        rows: List[Dict[str, Any]] = []
        for index, stamp in enumerate(times):
            row: Dict[str, Any] = {"time": self._time.convert(name, stamp)}
            for field, (spec, values) in columns.items():
                if values is None:
                    row[field] = None
                    continue
                if index >= len(values):
                    raise DataShapeError(
                        name, spec.source, f"has {len(values)} values, expected {len(times)}"
                    )
                row[field] = spec.convert(name, values[index])
            rows.append(row)
        return rows

    def normalize(self, payload: Mapping[str, Any], location: Location) -> NormalizedForecast:
        current_section = self._section(payload, "current")
        current = HourlyRecord(
            time=self._time.extract("current", current_section),
            **{field: spec.extract("current", current_section) for field, spec in self._current.items()},
        )

        hourly = tuple(
            HourlyRecord(**row) for row in self._rows("hourly", self._section(payload, "hourly"), self._hourly)
        )
        daily = tuple(
            DailyRecord(date=row.pop("time"), **row)
            for row in self._rows("daily", self._section(payload, "daily"), self._daily)
        )

        return NormalizedForecast(
            location=location,
            timezone=payload.get("timezone") or location.timezone,
            current=current,
            hourly=hourly,
            daily=daily,
        )


# Open-Meteo forecast API (metric units, snow depth reported in metres)
_OPEN_METEO_CURRENT = {
    "temperature": FieldMapping("temperature_2m"),
    "wind_speed": FieldMapping("windspeed_10m"),
    "precipitation": FieldMapping("precipitation"),
    "weather_code": FieldMapping("weathercode", converter=_weather_code),
}

_OPEN_METEO_HOURLY = {
    **_OPEN_METEO_CURRENT,
    "snow_depth": FieldMapping("snow_depth", converter=_metres_to_centimetres, required=False),
}

_OPEN_METEO_DAILY = {
    "temperature_max": FieldMapping("temperature_2m_max"),
    "temperature_min": FieldMapping("temperature_2m_min"),
    "precipitation_sum": FieldMapping("precipitation_sum"),
    "wind_speed_max": FieldMapping("windspeed_10m_max"),
    "weather_code": FieldMapping("weathercode", converter=_weather_code),
}

DEFAULT_NORMALIZER = ForecastNormalizer(
    current=_OPEN_METEO_CURRENT,
    hourly=_OPEN_METEO_HOURLY,
    daily=_OPEN_METEO_DAILY,
)


def normalize(payload: Mapping[str, Any], location: Location) -> NormalizedForecast:
    return DEFAULT_NORMALIZER.normalize(payload, location)
