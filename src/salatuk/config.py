"""Configuration management."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Self

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Third-party loggers that flood the log at INFO: access lines every tick and
# one scheduler line per trigger per resync
_NOISY_LOGGERS = ("uvicorn.access", "apscheduler", "timezonefinder")


def _log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level


@dataclass(frozen=True)
class AppConfig:
    """Server configuration read from SALATUK_* environment variables."""

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    # None selects the repository default (~/.config/salatuk/settings.json)
    settings_path: Path | None = None

    @classmethod
    def from_env(cls) -> Self:
        """
        Read the server configuration.

        Raises:
            ValueError: SALATUK_PORT is not a port number or SALATUK_LOG_LEVEL is unknown
        """
        raw_port = os.getenv("SALATUK_PORT", str(cls.port))
        if not raw_port.isdigit() or not 0 < int(raw_port) < 65536:
            raise ValueError(f"SALATUK_PORT must be a port number, got {raw_port!r}")

        settings_path = os.getenv("SALATUK_SETTINGS_PATH")
        return cls(
            host=os.getenv("SALATUK_HOST", cls.host),
            port=int(raw_port),
            log_level=_log_level(os.getenv("SALATUK_LOG_LEVEL", cls.log_level)),
            settings_path=Path(settings_path).expanduser() if settings_path else None,
        )


def setup_logging(level: str = "INFO") -> None:
    """Log salatuk at *level*; the noisy libraries stay at WARNING unless debugging."""
    level = _log_level(level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
