"""Weather-driven travel activity recommendations."""

from .models import ActivityScore, ActivityType, HourlyRecord, Location, NormalizedForecast
from .normalization import DEFAULT_NORMALIZER, DataShapeError, ForecastNormalizer, normalize
from .services.scoring import rank_activities

__all__ = [
    "ActivityScore",
    "ActivityType",
    "DataShapeError",
    "DEFAULT_NORMALIZER",
    "ForecastNormalizer",
    "HourlyRecord",
    "Location",
    "NormalizedForecast",
    "normalize",
    "rank_activities",
]
