from __future__ import annotations

import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from travel_planner.config import app_config
from travel_planner.http_client import ProviderError
from travel_planner.logging import bind_request_context, clear_request_context, get_logger, setup_logging
from travel_planner.models import Location
from travel_planner.normalization import DataShapeError
from travel_planner.services.geocoding import GeocodingService
from travel_planner.services.scoring import ActivityRanker
from travel_planner.services.weather import OpenMeteoClient, WeatherService

setup_logging(app_config.logging)
logger = get_logger(__name__)

MAX_SUGGESTIONS = 20

app = FastAPI(title="Travel Planner API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _request_context(request: Request, call_next):
    bind_request_context(request_id=uuid.uuid4().hex, path=request.url.path)
    try:
        response = await call_next(request)
        logger.info("api.request", method=request.method, status=response.status_code)
        return response
    finally:
        clear_request_context()


class LocationPayload(BaseModel):
    id: int
    name: str
    country: str
    country_code: str
    latitude: float
    longitude: float
    timezone: str
    population: Optional[int] = None
    admin1: Optional[str] = None


class HourlyPayload(BaseModel):
    time: str
    temperature: float
    wind_speed: float
    precipitation: float
    weather_code: int
    snow_depth: Optional[float] = None


class DailyPayload(BaseModel):
    date: str
    temperature_max: float
    temperature_min: float
    precipitation_sum: float
    wind_speed_max: float
    weather_code: int


class ForecastResponse(BaseModel):
    location: LocationPayload
    timezone: str
    current: HourlyPayload
    hourly: List[HourlyPayload]
    daily: List[DailyPayload]


class ActivityPayload(BaseModel):
    type: str
    name: str
    score: int
    suitable: bool
    reason: str


class RankingResponse(BaseModel):
    location: LocationPayload
    forecast: ForecastResponse
    activities: List[ActivityPayload]
    ranked_at: datetime


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


@lru_cache(maxsize=1)
def get_client() -> OpenMeteoClient:
    return OpenMeteoClient()


def get_weather_service(client: OpenMeteoClient = Depends(get_client)) -> WeatherService:
    return WeatherService(client)


def get_geocoding_service(client: OpenMeteoClient = Depends(get_client)) -> GeocodingService:
    return GeocodingService(client)


def get_ranker() -> ActivityRanker:
    return ActivityRanker()


@app.exception_handler(ProviderError)
async def _provider_error(request: Request, exc: ProviderError) -> JSONResponse:
    logger.error("api.provider_error", path=request.url.path, status=exc.status_code, error=str(exc))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(DataShapeError)
async def _data_shape_error(request: Request, exc: DataShapeError) -> JSONResponse:
    logger.error("api.malformed_forecast", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=502, content={"detail": f"Malformed forecast from provider: {exc}"})


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@app.get("/cities", response_model=List[LocationPayload])
def city_suggestions(
    query: str,
    count: int = Query(10, ge=1),
    geocoding: GeocodingService = Depends(get_geocoding_service),
) -> List[LocationPayload]:
    cities = geocoding.search_cities(query, min(count, MAX_SUGGESTIONS))
    return [LocationPayload(**city.to_dict()) for city in cities]


@app.get("/forecast", response_model=ForecastResponse)
def weather_forecast(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    timezone: str = Query(...),
    weather: WeatherService = Depends(get_weather_service),
) -> ForecastResponse:
    forecast = weather.get_forecast(Location.from_coordinates(latitude, longitude, timezone))
    return ForecastResponse(**forecast.to_dict())


@app.get("/rankings", response_model=RankingResponse)
def activity_ranking(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    timezone: str = Query(...),
    weather: WeatherService = Depends(get_weather_service),
    ranker: ActivityRanker = Depends(get_ranker),
) -> RankingResponse:
    location = Location.from_coordinates(latitude, longitude, timezone)
    ranking = ranker.rank(weather.get_forecast(location))
    return RankingResponse(**ranking.to_dict())


def main() -> None:
    import uvicorn

    logger.info("server.start", host=app_config.server.host, port=app_config.server.port, env=app_config.server.env)
    uvicorn.run(app, host=app_config.server.host, port=app_config.server.port)


if __name__ == "__main__":
    main()
