"""
FastAPI application exposing the multi-city weather endpoint.
"""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .external_api import (
    OpenWeatherMapClient,
    UpstreamStatusError,
    WeatherAPIError,
)
from .models import ErrorResponse, WeatherBatchResponse, WeatherData
from .weather_service import WeatherService

logger = logging.getLogger(__name__)

MISSING_CITY_MESSAGE = "At least one city parameter is required"
SUCCESS_MESSAGE = "Weather fetched successfully"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the {"error": ...} envelope used by every failure path."""
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def build_weather_service(settings: Settings) -> WeatherService:
    client = OpenWeatherMapClient(
        settings.api_key, base_url=settings.base_url, timeout=settings.timeout
    )
    return WeatherService(client, max_concurrency=settings.max_concurrency)


def get_weather_service(request: Request) -> WeatherService:
    """Dependency returning the service built at application creation."""
    return request.app.state.weather_service


async def log_request(request: Request, call_next):
    """Log method, path and remote address of every incoming request."""
    remote_addr = request.client.host if request.client else "-"
    logger.info(
        "Request received - Method: %s, Path: %s, RemoteAddr: %s",
        request.method,
        request.url.path,
        remote_addr,
    )
    return await call_next(request)


async def global_exception_handler(request, exc):  # pylint: disable=unused-argument
    """Global exception handler for unhandled errors."""
    logger.error("Unhandled exception: %s", str(exc))
    return error_response(500, str(exc) or "Internal Server Error")


async def get_cities_weather(
    city: List[str] = Query(default=[], description="City name, may be repeated"),
    service: WeatherService = Depends(get_weather_service),
):
    """
    Get current weather for every requested city.

    Cities whose lookup fails are left out of `data`; the request still
    succeeds.
    """
    if not city:
        logger.info("No cities provided in the query parameter")
        return error_response(400, MISSING_CITY_MESSAGE)

    try:
        results = await service.get_batch_weather(city)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error fetching weather data: %s", str(e))
        return error_response(500, str(e) or "Failed to fetch weather data")

    logger.info("Successfully fetched weather data for cities: %s", city)
    return WeatherBatchResponse(message=SUCCESS_MESSAGE, data=results)


async def get_city_weather(
    city: str, service: WeatherService = Depends(get_weather_service)
):
    """
    Get current weather for a single city.

    Upstream failures are reported instead of absorbed.
    """
    if not city.strip():
        return error_response(400, "City name cannot be empty")

    try:
        return await service.get_weather(city)

    except UpstreamStatusError as e:
        logger.warning("Weather API error for %s: %s", city, str(e))
        if e.status_code == 404:
            return error_response(404, f"City '{city}' not found")
        if e.status_code == 401:
            return error_response(401, "Invalid API key")
        return error_response(502, "Weather service returned an error")

    except WeatherAPIError as e:
        logger.warning("Weather API error for %s: %s", city, str(e))
        return error_response(502, e.message)


async def health_check(service: WeatherService = Depends(get_weather_service)):
    """Health check endpoint reporting upstream reachability."""
    return await service.health_check()


def create_app(
    settings: Settings, weather_service: Optional[WeatherService] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Resolved service settings
        weather_service: Service to use (built from settings when omitted)

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="Weather API Service",
        description="Concurrent multi-city current weather lookups",
        version="1.0.0",
    )
    app.state.settings = settings
    if weather_service is None:
        weather_service = build_weather_service(settings)
    app.state.weather_service = weather_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_request)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_api_route(
        "/",
        get_cities_weather,
        methods=["GET"],
        response_model=WeatherBatchResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    app.add_api_route(
        "/weather/{city}",
        get_city_weather,
        methods=["GET"],
        response_model=WeatherData,
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
        },
    )
    app.add_api_route("/health", health_check, methods=["GET"])

    return app
