"""
External API client for OpenWeatherMap service.
"""

import asyncio
import json
import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from .config import ExternalAPIConfig
from .models import WeatherData

logger = logging.getLogger(__name__)


class WeatherAPIError(Exception):
    """Custom exception for weather API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class WeatherTransportError(WeatherAPIError):
    """The upstream API could not be reached or did not answer in time."""


class UpstreamStatusError(WeatherAPIError):
    """The upstream API answered with a non-200 status."""

    def __init__(self, city: str, status_code: int, upstream_message: str = ""):
        self.city = city
        self.upstream_message = upstream_message
        message = f"Upstream returned status {status_code} for {city}"
        if upstream_message:
            message = f"{message}: {upstream_message}"
        super().__init__(message, status_code=status_code)


class WeatherDecodeError(WeatherAPIError):
    """The upstream body did not match the weather record shape."""


class OpenWeatherMapClient:
    """
    Asynchronous client for the OpenWeatherMap current weather endpoint.

    One call performs exactly one GET: there are no retries and nothing is
    cached.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the OpenWeatherMap client.

        Args:
            api_key: OpenWeatherMap API key
            base_url: API root (defaults to config value)
            timeout: Request timeout in seconds (defaults to config value)
        """
        self.api_key = api_key
        self.base_url = (base_url or ExternalAPIConfig.OPENWEATHER_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(
            total=timeout or ExternalAPIConfig.OPENWEATHER_TIMEOUT
        )

    def create_session(self) -> aiohttp.ClientSession:
        """Open a session carrying this client's timeout policy."""
        return aiohttp.ClientSession(timeout=self.timeout)

    async def get_weather(
        self, city: str, session: Optional[aiohttp.ClientSession] = None
    ) -> WeatherData:
        """
        Get current weather data for a single city.

        Args:
            city: Name of the city, sent upstream as given
            session: Session to reuse; a private one is opened when omitted

        Returns:
            WeatherData: Decoded weather record

        Raises:
            WeatherAPIError: If the city name is empty
            WeatherTransportError: If the request fails or times out
            UpstreamStatusError: If the upstream status is not 200
            WeatherDecodeError: If the body is not a valid weather record
        """
        if not city or not city.strip():
            raise WeatherAPIError("City name cannot be empty")

        if session is None:
            async with self.create_session() as own_session:
                return await self._fetch(own_session, city)
        return await self._fetch(session, city)

    async def _fetch(self, session: aiohttp.ClientSession, city: str) -> WeatherData:
        params = {
            "q": city,
            "appid": self.api_key,
        }
        url = f"{self.base_url}/weather"

        logger.debug("Requesting weather data for city: %s", city)
        try:
            async with session.get(url, params=params) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise WeatherTransportError(
                f"Failed to fetch weather data for {city}: {e!r}"
            ) from e

        if status != 200:
            raise UpstreamStatusError(city, status, self._upstream_message(body))

        weather_data = self._parse_weather_data(city, body)
        logger.debug("Successfully fetched weather for %s", city)
        return weather_data

    @staticmethod
    def _parse_weather_data(city: str, body: bytes) -> WeatherData:
        try:
            return WeatherData.model_validate_json(body)
        except ValidationError as e:
            raise WeatherDecodeError(
                f"Error parsing weather data for {city}: {e.error_count()} invalid field(s)"
            ) from e

    @staticmethod
    def _upstream_message(body: bytes) -> str:
        # OpenWeatherMap error bodies look like {"cod": "404", "message": "city not found"}
        try:
            payload = json.loads(body)
        except ValueError:
            return ""
        if isinstance(payload, dict):
            return str(payload.get("message", ""))
        return ""

    async def health_check(self) -> bool:
        """
        Check if the OpenWeatherMap API is accessible.

        Returns:
            bool: True if API is accessible, False otherwise
        """
        try:
            await self.get_weather(ExternalAPIConfig.HEALTH_CHECK_CITY)
            logger.info("OpenWeatherMap API health check passed")
            return True
        except WeatherTransportError as e:
            logger.error("Network error during health check: %s", str(e))
            return False
        except WeatherAPIError as e:
            logger.warning("OpenWeatherMap API health check failed: %s", str(e))
            return False
