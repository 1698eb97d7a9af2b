"""Main entry point for the Salatuk service."""

import logging

import uvicorn

from salatuk.api.app import create_app
from salatuk.config import AppConfig, setup_logging


def main() -> None:
    """Run the Salatuk web service."""
    config = AppConfig.from_env()
    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Starting Salatuk...")

    app = create_app(settings_path=config.settings_path)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
