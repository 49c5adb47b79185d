"""Application configuration classes."""

from __future__ import annotations

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MINUTES_PER_DAY = 24 * 60
DEFAULT_FEED_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist.xml"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    SCHEDULER_ENABLED = _get_env("SCHEDULER_ENABLED", "true").lower() == "true"
    DATASET_PRELOAD = _get_env("DATASET_PRELOAD", "true").lower() == "true"

    APP_NAME = "ecb-exchange-rates"
    FEED_URL = _get_env("FEED_URL", DEFAULT_FEED_URL)
    CACHE_PATH = _get_env("CACHE_PATH", os.path.join("data", "eurofxref-hist.xml"))
    # The ECB publishes around 16:00 CET.
    FEED_TIMEZONE = _get_env("FEED_TIMEZONE", "Europe/Berlin")
    REFRESH_MINUTE_OF_DAY = int(_get_env("REFRESH_MINUTE_OF_DAY", "990"))
    REFRESH_MISFIRE_GRACE_SECONDS = int(_get_env("REFRESH_MISFIRE_GRACE_SECONDS", "3600"))
    REQUEST_TIMEOUT_SECONDS = int(_get_env("REQUEST_TIMEOUT_SECONDS", "30"))
    FEED_MAX_RETRIES = int(_get_env("FEED_MAX_RETRIES", "3"))
    FEED_BACKOFF_SECONDS = float(_get_env("FEED_BACKOFF_SECONDS", "0.5"))
    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If the refresh schedule or feed time zone is invalid.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    validate_schedule(config_cls.REFRESH_MINUTE_OF_DAY, config_cls.FEED_TIMEZONE)
    return config_cls


def validate_schedule(refresh_minute: int, timezone: str) -> None:
    """Ensure the refresh minute falls within a day and the zone is known."""

    if not 0 <= int(refresh_minute) < MINUTES_PER_DAY:
        raise ValueError(
            f"REFRESH_MINUTE_OF_DAY must be between 0 and {MINUTES_PER_DAY - 1}, "
            f"got {refresh_minute}"
        )
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown FEED_TIMEZONE '{timezone}'") from exc
