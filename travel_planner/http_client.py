from __future__ import annotations

import time
from typing import Any, Dict, Mapping, Optional

import httpx

from travel_planner.config import OpenMeteoConfig, app_config
from travel_planner.logging import get_logger

logger = get_logger(__name__)


DEFAULT_USER_AGENT = "TravelPlanner/1.0 (+https://github.com/travel-planner)"


class ProviderError(RuntimeError):
    """An upstream weather/geocoding request returned an error response."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpFetcher:
    """httpx client wrapper that retries transport failures with backoff."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        max_attempts: int = 3,
        backoff_factor: float = 0.5,
        timeout: float = 10.0,
    ) -> None:
        self.client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"},
        )
        self.max_attempts = max_attempts
        self.backoff_factor = backoff_factor

    @classmethod
    def from_config(cls, config: Optional[OpenMeteoConfig] = None, client: Optional[httpx.Client] = None) -> "HttpFetcher":
        config = config or app_config.open_meteo
        return cls(
            client,
            max_attempts=config.max_attempts,
            backoff_factor=config.backoff_factor,
            timeout=config.timeout_seconds,
        )

    def fetch(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                logger.info("http.fetch", url=url, attempt=attempt)
                return self.client.get(url, params=params)
            except httpx.RequestError as exc:
                last_error = exc
                logger.warning("http.fetch.retry", url=url, attempt=attempt, error=str(exc))
                if attempt == self.max_attempts:
                    raise
                time.sleep(self.backoff_factor * (2 ** (attempt - 1)))
        if last_error:
            raise last_error
        raise RuntimeError("Unexpected fetch state")

    def fetch_json(self, url: str, *, params: Optional[Mapping[str, Any]] = None, context: str) -> Dict[str, Any]:
        """Fetch ``url`` and decode its JSON body.

        Transport failures that outlast the retries, error statuses and
        undecodable bodies all surface as :class:`ProviderError`.
        """

        try:
            response = self.fetch(url, params=params)
        except httpx.RequestError as exc:
            raise ProviderError(f"{context}: {exc}") from exc

        if response.is_error:
            detail = response.reason_phrase
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("reason"):
                detail = body["reason"]
            logger.warning("http.fetch.error", url=url, status=response.status_code, detail=detail)
            raise ProviderError(f"{context}: [{response.status_code}] {detail}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("http.fetch.invalid_json", url=url, status=response.status_code)
            raise ProviderError(f"{context}: invalid JSON", status_code=response.status_code) from exc
