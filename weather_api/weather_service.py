"""
Weather service layer: single-city lookups and the concurrent multi-city fetch.
"""

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from .external_api import OpenWeatherMapClient, WeatherAPIError
from .models import WeatherData

logger = logging.getLogger(__name__)


class WeatherService:
    """
    Weather service that fans a batch of cities out to the upstream API.
    """

    def __init__(
        self, api_client: OpenWeatherMapClient, max_concurrency: Optional[int] = None
    ):
        """
        Initialize the weather service.

        Args:
            api_client: Client used for every upstream call
            max_concurrency: Cap on in-flight requests per batch (None = one
                task per city, unbounded)
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer")
        self.api_client = api_client
        self.max_concurrency = max_concurrency

    async def get_weather(self, city: str) -> WeatherData:
        """
        Get weather information for a single city.

        Raises:
            WeatherAPIError: If weather data cannot be retrieved
        """
        return await self.api_client.get_weather(city)

    async def get_batch_weather(self, cities: List[str]) -> List[WeatherData]:
        """
        Get weather information for multiple cities concurrently.

        Every city occurrence gets its own task. A failed city is logged and
        left out of the result; it never cancels its siblings or fails the
        batch. The call returns once every task has finished.

        Args:
            cities: City names, duplicates allowed

        Returns:
            List[WeatherData]: Successful records in completion order
        """
        if not cities:
            return []

        logger.info("Fetching weather for %d cities", len(cities))

        if self.max_concurrency is None:
            limiter = None
        else:
            limiter = asyncio.Semaphore(self.max_concurrency)

        results: List[WeatherData] = []
        async with self.api_client.create_session() as session:
            tasks = [
                asyncio.create_task(self._fetch_one(session, city, limiter))
                for city in cities
            ]
            try:
                # only this loop appends, so completions never race on results
                for completed in asyncio.as_completed(tasks):
                    weather_data = await completed
                    if weather_data is not None:
                        results.append(weather_data)
            finally:
                pending = [task for task in tasks if not task.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

        logger.info(
            "Successfully fetched weather for %d/%d cities",
            len(results),
            len(cities),
        )
        return results

    async def _fetch_one(
        self,
        session: aiohttp.ClientSession,
        city: str,
        limiter: Optional[asyncio.Semaphore],
    ) -> Optional[WeatherData]:
        """Fetch one city, turning any failure into None."""
        guard = limiter if limiter is not None else contextlib.nullcontext()
        try:
            async with guard:
                return await self.api_client.get_weather(city, session=session)
        except WeatherAPIError as e:
            logger.warning("Failed to fetch weather for %s: %s", city, str(e))
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected error fetching weather for %s", city)
        return None

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check of the weather service.

        Returns:
            Dict with health status information
        """
        api_healthy = await self.api_client.health_check()

        return {
            "status": "healthy" if api_healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "openweathermap_api": "healthy" if api_healthy else "unhealthy",
            },
        }
