"""
Pytest configuration and shared fixtures.
"""

import copy

import pytest

from weather_api.config import Settings


@pytest.fixture
def sample_api_key() -> str:
    """Sample API key for testing."""
    return "test_openweather_api_key_123"


@pytest.fixture
def sample_cities() -> list[str]:
    """Sample city names for testing."""
    return ["Seoul", "Tokyo", "New York", "London", "Paris"]


@pytest.fixture
def settings(sample_api_key) -> Settings:
    """Settings pointing at the default upstream."""
    return Settings(api_key=sample_api_key)


OPENWEATHER_PAYLOAD = {
    "coord": {"lon": 126.9778, "lat": 37.5683},
    "weather": [
        {"id": 802, "main": "Clouds", "description": "scattered clouds", "icon": "03d"}
    ],
    "base": "stations",
    "main": {
        "temp": 295.65,
        "feels_like": 295.4,
        "temp_min": 294.15,
        "temp_max": 297.04,
        "pressure": 1013,
        "humidity": 65,
        "sea_level": 1013,
        "grnd_level": 1003,
    },
    "visibility": 10000,
    "wind": {"speed": 3.6, "deg": 270, "gust": 5.1},
    "rain": {"1h": 0.25},
    "clouds": {"all": 40},
    "dt": 1640995200,
    "sys": {
        "type": 1,
        "id": 8105,
        "country": "KR",
        "sunrise": 1640989471,
        "sunset": 1641024842,
    },
    "timezone": 32400,
    "id": 1835848,
    "name": "Seoul",
    "cod": 200,
}


def openweather_payload(name: str = "Seoul", **overrides) -> dict:
    """Return a fresh upstream body for `name`."""
    payload = copy.deepcopy(OPENWEATHER_PAYLOAD)
    payload["name"] = name
    payload.update(overrides)
    return payload


@pytest.fixture
def mock_openweather_response() -> dict:
    """Mock OpenWeatherMap API response."""
    return openweather_payload()


@pytest.fixture
def make_payload():
    """Factory for upstream bodies with a custom city name."""
    return openweather_payload
