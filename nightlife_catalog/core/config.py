"""Configuration helpers for the nightlife snapshot job.

The SerpAPI key is billable, so the environment (optionally seeded from a
``.env`` file) is the only way to provide it. Everything else has a default
matching the Kraków setup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    serpapi_key: str
    snapshot_path: str = "public/maps-bars.json"
    coord_epsilon: float = 0.0006
    details_budget: int = 80
    search_delay_seconds: float = 0.3
    details_delay_seconds: float = 0.35
    request_timeout_seconds: float = 30.0


def _get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value or not value.strip():
        raise ConfigError(f"{name} must be set in the environment for the snapshot job to run.")
    return value.strip()


def _get_number_env(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache job settings to avoid repeated env lookups."""
    load_dotenv()

    serpapi_key = _get_required_env("SERPAPI_KEY")
    snapshot_path = os.getenv("SNAPSHOT_PATH") or Settings.snapshot_path

    settings = Settings(
        serpapi_key=serpapi_key,
        snapshot_path=snapshot_path,
        coord_epsilon=_get_number_env("COORD_EPSILON", Settings.coord_epsilon, float),
        details_budget=_get_number_env("DETAILS_BUDGET", Settings.details_budget, int),
        search_delay_seconds=_get_number_env("SEARCH_DELAY_SECONDS", Settings.search_delay_seconds, float),
        details_delay_seconds=_get_number_env("DETAILS_DELAY_SECONDS", Settings.details_delay_seconds, float),
        request_timeout_seconds=_get_number_env(
            "REQUEST_TIMEOUT_SECONDS", Settings.request_timeout_seconds, float
        ),
    )
    if settings.details_delay_seconds < settings.search_delay_seconds:
        logger.warning(
            "DETAILS_DELAY_SECONDS (%s) is shorter than SEARCH_DELAY_SECONDS (%s)",
            settings.details_delay_seconds,
            settings.search_delay_seconds,
        )
    return settings
