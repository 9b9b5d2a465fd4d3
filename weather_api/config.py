"""
Configuration constants and runtime settings for the weather API service.
"""

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the process environment does not describe a usable service."""


class ExternalAPIConfig:
    """External API configuration"""

    OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
    OPENWEATHER_TIMEOUT = 10.0
    HEALTH_CHECK_CITY = "London"


class ServerConfig:
    """HTTP server defaults"""

    DEFAULT_HOST = "0.0.0.0"
    DEFAULT_PORT = 3000
    DEFAULT_LOG_LEVEL = "INFO"
    LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseModel):
    """
    Settings resolved once at startup and handed to the application factory.
    """

    api_key: str = Field(..., min_length=1)
    host: str = ServerConfig.DEFAULT_HOST
    port: int = Field(ServerConfig.DEFAULT_PORT, ge=1, le=65535)
    log_level: str = ServerConfig.DEFAULT_LOG_LEVEL
    base_url: str = ExternalAPIConfig.OPENWEATHER_BASE_URL
    timeout: float = Field(ExternalAPIConfig.OPENWEATHER_TIMEOUT, gt=0)
    max_concurrency: Optional[int] = Field(None, ge=1)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("api_key")
    @classmethod
    def api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API key cannot be blank")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ServerConfig.LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings: Validated settings

        Raises:
            ConfigError: If the API key is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        api_key = env.get("OPEN_WEATHER_API_KEY", "")
        if not api_key.strip():
            raise ConfigError("OPEN_WEATHER_API_KEY environment variable is required")

        values = {"api_key": api_key}
        optional_keys = {
            "HOST": "host",
            "PORT": "port",
            "LOG_LEVEL": "log_level",
            "OPENWEATHER_BASE_URL": "base_url",
            "OPENWEATHER_TIMEOUT": "timeout",
        }
        for env_name, field_name in optional_keys.items():
            raw = env.get(env_name, "").strip()
            if raw:
                values[field_name] = raw

        # 0 keeps the fan-out unbounded
        max_concurrency = env.get("MAX_CONCURRENCY", "").strip()
        if max_concurrency and max_concurrency != "0":
            values["max_concurrency"] = max_concurrency

        cors_origins = env.get("CORS_ORIGINS", "").strip()
        if cors_origins:
            values["cors_origins"] = [
                origin.strip() for origin in cors_origins.split(",") if origin.strip()
            ]

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
