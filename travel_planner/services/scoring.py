from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from travel_planner.logging import get_logger
from travel_planner.models import (
    ActivityRanking,
    ActivityScore,
    ActivityType,
    HourlyRecord,
    NormalizedForecast,
)

logger = get_logger(__name__)

WINDOW_HOURS = 24
MIN_SCORE = 0
MAX_SCORE = 100


def analysis_window(hourly: Sequence[HourlyRecord], hours: int = WINDOW_HOURS) -> Tuple[HourlyRecord, ...]:
    """Leading slice of the hourly forecast that every activity is scored on."""
    return tuple(hourly[:hours])


def _average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


@dataclass(frozen=True)
class WindowStats:
    """Window-level aggregates shared by the activity evaluators.

    All means are 0 for an empty window. Missing snow depth counts as 0 cm.
    """

    temperature: float = 0.0
    wind_speed: float = 0.0
    precipitation: float = 0.0
    snow_depth: float = 0.0
    clear_ratio: float = 0.0
    hours: int = 0

    @classmethod
    def from_window(cls, window: Sequence[HourlyRecord]) -> "WindowStats":
        clear_hours = sum(1 for hour in window if hour.is_clear)
        return cls(
            temperature=_average([hour.temperature for hour in window]),
            wind_speed=_average([hour.wind_speed for hour in window]),
            precipitation=_average([hour.precipitation for hour in window]),
            snow_depth=_average([hour.snow_depth if hour.snow_depth is not None else 0.0 for hour in window]),
            clear_ratio=clear_hours / max(len(window), 1),
            hours=len(window),
        )


def _clamp(score: int) -> int:
    return max(MIN_SCORE, min(score, MAX_SCORE))


def score_skiing(stats: WindowStats) -> ActivityScore:
    # Resorts generally need a 30 cm base and stop lifts above 60 km/h.
    temp = stats.temperature
    score = 0
    reasons: List[str] = []

    if -20 <= temp <= 2:
        ideal = temp <= -2
        score += 35 if ideal else 20
        reasons.append(f"temperature {temp:.1f}°C is {'ideal' if ideal else 'marginal'} for snow")
    else:
        reasons.append(f"temperature {temp:.1f}°C is too {'warm' if temp > 2 else 'extreme'} for skiing")

    if stats.snow_depth >= 30:
        score += 40
        reasons.append(f"good snow depth ({stats.snow_depth:.0f} cm)")
    elif stats.snow_depth >= 10:
        score += 20
        reasons.append(f"moderate snow depth ({stats.snow_depth:.0f} cm)")
    else:
        reasons.append("insufficient snow depth")

    if stats.wind_speed > 60:
        score = max(0, score - 30)
        reasons.append(f"high winds ({stats.wind_speed:.0f} km/h) are dangerous")
    elif stats.wind_speed <= 30:
        score += 15
        reasons.append("calm winds")

    if 0 < stats.precipitation <= 2 and temp < 0:
        score += 10
        reasons.append("light snowfall expected (fresh powder)")

    return ActivityScore.from_reasons(ActivityType.SKIING, _clamp(score), reasons)


def score_surfing(stats: WindowStats) -> ActivityScore:
    # Air temperature and wind stand in for swell data, which the forecast lacks.
    temp = stats.temperature
    wind = stats.wind_speed
    score = 0
    reasons: List[str] = []

    if 18 <= temp <= 32:
        score += 30
        reasons.append(f"comfortable air temperature ({temp:.1f}°C)")
    elif temp >= 12:
        score += 15
        reasons.append(f"cool but manageable temperature ({temp:.1f}°C)")
    else:
        reasons.append(f"cold temperature ({temp:.1f}°C) makes surfing uncomfortable")

    if 10 <= wind <= 30:
        score += 40
        reasons.append(f"ideal wind speed ({wind:.0f} km/h) for waves")
    elif 30 < wind <= 50:
        score += 15
        reasons.append(f"strong winds ({wind:.0f} km/h) — experienced surfers only")
    elif wind < 10:
        score += 20
        reasons.append(f"light winds ({wind:.0f} km/h) — flat water likely")
    else:
        score = max(0, score - 20)
        reasons.append(f"dangerous winds ({wind:.0f} km/h)")

    if stats.precipitation < 1:
        score += 20
        reasons.append("dry conditions")
    elif stats.precipitation < 5:
        score += 10
        reasons.append("light rain expected")
    else:
        score -= 10
        reasons.append("heavy rain expected")

    if stats.clear_ratio >= 0.6:
        score += 10
        reasons.append("mostly clear skies")

    return ActivityScore.from_reasons(ActivityType.SURFING, _clamp(score), reasons)


def score_indoor_sightseeing(stats: WindowStats) -> ActivityScore:
    """Indoor venues are always open, so the score starts from a neutral 50.

    Poor outdoor weather raises it; great outdoor weather lowers it.
    """

    temp = stats.temperature
    precip = stats.precipitation
    wind = stats.wind_speed
    score = 50
    reasons: List[str] = []

    if precip >= 5:
        score += 30
        reasons.append(f"heavy rain ({precip:.1f} mm/h) makes indoors appealing")
    elif precip >= 2:
        score += 15
        reasons.append("moderate rain expected")

    if temp < 0:
        score += 20
        reasons.append(f"freezing temperatures ({temp:.1f}°C) favour indoor activities")
    elif temp > 35:
        score += 15
        reasons.append(f"extreme heat ({temp:.1f}°C) — air-conditioned venues recommended")

    if wind > 60:
        score += 15
        reasons.append("strong winds make outdoor activities unsafe")

    if precip < 1 and 18 <= temp <= 28 and wind < 20:
        score -= 15
        reasons.append("beautiful outdoor conditions — consider going outside!")

    if not reasons:
        reasons.append("moderate conditions — both indoor and outdoor activities viable")

    return ActivityScore.from_reasons(ActivityType.INDOOR_SIGHTSEEING, _clamp(score), reasons)


def score_outdoor_sightseeing(stats: WindowStats) -> ActivityScore:
    temp = stats.temperature
    precip = stats.precipitation
    wind = stats.wind_speed
    score = 0
    reasons: List[str] = []

    if 15 <= temp <= 28:
        score += 35
        reasons.append(f"pleasant temperature ({temp:.1f}°C)")
    elif 5 <= temp < 15:
        score += 20
        reasons.append(f"cool but walkable ({temp:.1f}°C) — bring a jacket")
    elif 28 < temp <= 35:
        score += 15
        reasons.append(f"warm ({temp:.1f}°C) — stay hydrated")
    else:
        reasons.append(f"temperature ({temp:.1f}°C) is not ideal for outdoor sightseeing")

    if stats.clear_ratio >= 0.7:
        score += 30
        reasons.append("mostly clear skies")
    elif stats.clear_ratio >= 0.4:
        score += 15
        reasons.append("partly cloudy")
    else:
        reasons.append("overcast conditions")

    if precip < 0.5:
        score += 25
        reasons.append("dry conditions")
    elif precip < 2:
        score += 10
        reasons.append("light rain possible — bring an umbrella")
    else:
        score -= 15
        reasons.append(f"rain expected ({precip:.1f} mm/h)")

    if wind > 50:
        score -= 20
        reasons.append(f"strong winds ({wind:.0f} km/h)")
    elif wind < 20:
        score += 10
        reasons.append("calm winds")

    return ActivityScore.from_reasons(ActivityType.OUTDOOR_SIGHTSEEING, _clamp(score), reasons)


# Evaluation order; ties keep this order after the stable sort.
EVALUATORS: Tuple[Callable[[WindowStats], ActivityScore], ...] = (
    score_skiing,
    score_surfing,
    score_indoor_sightseeing,
    score_outdoor_sightseeing,
)


def rank_activities(forecast: NormalizedForecast) -> List[ActivityScore]:
    """Score all four activities on the next 24 hours, best first."""

    stats = WindowStats.from_window(analysis_window(forecast.hourly))
    activities = [evaluate(stats) for evaluate in EVALUATORS]
    activities.sort(key=lambda activity: activity.score, reverse=True)
    return activities


class ActivityRanker:
    """Builds timestamped :class:`ActivityRanking` results for a forecast."""

    def rank(self, forecast: NormalizedForecast, *, ranked_at: Optional[datetime] = None) -> ActivityRanking:
        activities = rank_activities(forecast)
        top = activities[0]
        logger.info(
            "scoring.ranked",
            location=forecast.location.name,
            hours=min(len(forecast.hourly), WINDOW_HOURS),
            top_activity=top.type.value,
            top_score=top.score,
        )
        return ActivityRanking(
            location=forecast.location,
            forecast=forecast,
            activities=activities,
            ranked_at=ranked_at or datetime.now(timezone.utc),
        )
