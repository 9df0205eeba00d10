"""Service layer for forecasts, geocoding and activity scoring."""

from .scoring import ActivityRanker, rank_activities

__all__ = ["ActivityRanker", "rank_activities"]
