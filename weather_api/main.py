"""
Process entry point: resolve settings, configure logging and serve the API.

Run with: weather-api  (or python -m weather_api)
"""

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .config import ConfigError, ServerConfig, Settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = ServerConfig.DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(level=level, format=ServerConfig.LOG_FORMAT)


def main() -> None:
    # Values already in the environment win over the .env file
    load_dotenv()

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        configure_logging()
        logger.critical("%s", e)
        sys.exit(1)

    configure_logging(settings.log_level)
    app = create_app(settings)

    logger.info("Server started on port %d", settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
