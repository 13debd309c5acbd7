"""Service-wide configuration.

Resolves the response status code, database location and listen port from
the environment (optionally seeded from a `.env` file), falling back to
documented defaults. Resolution never aborts on a bad value; only a missing
database file is fatal.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Mapping, Optional, Tuple

from dotenv import load_dotenv

from .models_io import (
    DEFAULT_FALLBACK_MAX_ID,
    DEFAULT_LISTEN_PORT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_SELECTION_TIMEOUT,
    DEFAULT_STATUS_CODE,
    DEFAULT_STORAGE_LOCATION,
    DEFAULT_WORKERS,
    ResolvedConfig,
)

logger = logging.getLogger(__name__)

STATUS_CODE_VAR = "RESPONSE_CODE"
STORAGE_LOCATION_VAR = "DATABASE_URL"
LISTEN_PORT_VAR = "TEAPOT_FORTUNE_PORT"

FALLBACK_MAX_ID_VAR = "TEAPOT_FORTUNE_FALLBACK_MAX_ID"
MAX_ATTEMPTS_VAR = "TEAPOT_FORTUNE_MAX_ATTEMPTS"
TIMEOUT_VAR = "TEAPOT_FORTUNE_TIMEOUT"
WORKERS_VAR = "TEAPOT_FORTUNE_WORKERS"
LOG_LEVEL_VAR = "TEAPOT_FORTUNE_LOG_LEVEL"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _int_in_range(low: int, high: Optional[int] = None) -> Callable[[str], int]:
    def parse(raw: str) -> int:
        # Plain ASCII digits only: no sign, whitespace, underscores or other scripts
        if not (raw.isascii() and raw.isdigit()):
            raise ValueError(f"{raw!r} is not an unsigned integer")
        value = int(raw)
        if value < low or (high is not None and value > high):
            raise ValueError(f"{value} outside [{low}, {high}]")
        return value
    return parse


def _positive_float(raw: str) -> float:
    value = float(raw.strip())
    if not value > 0:
        raise ValueError(f"{value} is not positive")
    return value


def _storage_path(raw: str) -> Path:
    if not raw.strip():
        raise ValueError("empty path")
    return Path(raw)


def _log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level {raw!r}")
    return level


# (field, variable, parser, default, announce the default when unset)
_SETTINGS: Tuple[Tuple[str, str, Callable[[str], object], object, bool], ...] = (
    ("status_code", STATUS_CODE_VAR, _int_in_range(100, 599), DEFAULT_STATUS_CODE, True),
    ("storage_location", STORAGE_LOCATION_VAR, _storage_path, DEFAULT_STORAGE_LOCATION, True),
    ("listen_port", LISTEN_PORT_VAR, _int_in_range(0, 65535), DEFAULT_LISTEN_PORT, True),
    ("fallback_max_id", FALLBACK_MAX_ID_VAR, _int_in_range(1), DEFAULT_FALLBACK_MAX_ID, False),
    ("max_attempts", MAX_ATTEMPTS_VAR, _int_in_range(1), DEFAULT_MAX_ATTEMPTS, False),
    ("selection_timeout", TIMEOUT_VAR, _positive_float, DEFAULT_SELECTION_TIMEOUT, False),
    ("workers", WORKERS_VAR, _int_in_range(1), DEFAULT_WORKERS, False),
    ("log_level", LOG_LEVEL_VAR, _log_level, DEFAULT_LOG_LEVEL, False),
)


def _resolve(variable: str, parse: Callable[[str], object], default: object, announce: bool,
             environ: Mapping[str, str]) -> object:
    raw = environ.get(variable)
    if raw is None:
        if announce:
            logger.info('%s env variable not set, using default "%s".', variable, default)
        return default
    try:
        return parse(raw)
    except ValueError:
        logger.warning('%s "%s" is not valid. Using default "%s".', variable, raw, default)
        return default


def resolve_config(environ: Optional[Mapping[str, str]] = None) -> ResolvedConfig:
    """
    Build the immutable configuration from environment variables.

    Args:
        environ: Mapping to read from, `os.environ` when omitted

    Returns:
        ResolvedConfig with every unset or malformed value replaced by its default
    """
    if environ is None:
        environ = os.environ

    values = {
        name: _resolve(variable, parse, default, announce, environ)
        for name, variable, parse, default, announce in _SETTINGS
    }
    config = ResolvedConfig(**values)
    if config.status_code < 200:
        logger.warning(
            "%s %d is informational; HTTP clients will never receive it as a final response.",
            STATUS_CODE_VAR, config.status_code,
        )
    return config


def ensure_storage_exists(config: ResolvedConfig) -> None:
    """Exit the process with status 1 when the database file is missing."""
    if not config.storage_location.exists():
        logger.error(
            'Database file "%s" does not exist. Please create it and try again.',
            config.storage_location,
        )
        raise SystemExit(1)


def load_env_file(env_file: str = ".env") -> bool:
    """Seed the process environment from `env_file` without overriding it."""
    if not Path(env_file).is_file():
        logger.info("No env file found at %s, continuing.", env_file)
        return False
    return load_dotenv(env_file, override=False)


def load_config(env_file: str = ".env") -> ResolvedConfig:
    """Startup sequence: env file, resolution, then the storage existence check."""
    load_env_file(env_file)
    config = resolve_config()
    ensure_storage_exists(config)
    return config
