"""
Pydantic models for the upstream weather record and API envelopes.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    """Immutable base for every part of a weather record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Coordinates(_Record):
    lon: float
    lat: float


class WeatherCondition(_Record):
    """One weather condition descriptor (e.g. Rain, Clouds)."""

    id: int
    main: str
    description: str
    icon: str


class MainMetrics(_Record):
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    pressure: int
    humidity: int
    sea_level: Optional[int] = None
    grnd_level: Optional[int] = None


class Wind(_Record):
    speed: float
    deg: int
    gust: Optional[float] = None


class Rain(_Record):
    one_hour: Optional[float] = Field(None, alias="1h")


class Clouds(_Record):
    all: int


class SystemInfo(_Record):
    type: Optional[int] = None
    id: Optional[int] = None
    country: str
    sunrise: int
    sunset: int


class WeatherData(_Record):
    """
    Current weather for one city as returned by OpenWeatherMap.

    Built once per successful fetch and never mutated afterwards.
    """

    coord: Coordinates
    weather: Tuple[WeatherCondition, ...]
    base: str = ""
    main: MainMetrics
    visibility: Optional[int] = None
    wind: Optional[Wind] = None
    rain: Optional[Rain] = None
    clouds: Optional[Clouds] = None
    dt: int
    sys: SystemInfo
    timezone: Optional[int] = None
    id: int
    name: str
    cod: int


class WeatherBatchResponse(BaseModel):
    """Response model for multi-city weather queries."""

    message: str
    data: List[WeatherData]


class ErrorResponse(BaseModel):
    """Response model for error cases."""

    error: str
