"""
Combinator configuration.

Settings are read from environment variables, after loading a ``.env``
file (never overwriting variables that are already set).

Usage:
    from combine.config import get_config

    config = get_config()
    if config.log_discarded_failures:
        ...
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Type, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ENV_FILE = ".env"


def _get_env(key: str, default: T = None, cast: Type[T] = str) -> T:
    """Get environment variable with type casting."""
    value = os.environ.get(key)

    if value is None:
        return default

    if cast == bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    if cast == int:
        try:
            return int(value)
        except ValueError:
            return default

    return value


@dataclass
class CombineConfig:
    """Settings shared by all combinators and HTTP adapters."""
    log_discarded_failures: bool = True
    discarded_log_level: str = "DEBUG"
    unhandled_status: int = 404

    @property
    def discarded_level(self) -> int:
        """Numeric logging level for discarded failures."""
        level = logging.getLevelName(self.discarded_log_level.upper())
        if isinstance(level, int):
            return level
        return logging.DEBUG

    @classmethod
    def from_env(cls) -> 'CombineConfig':
        return cls(
            log_discarded_failures=_get_env("COMBINE_LOG_DISCARDED", True, bool),
            discarded_log_level=_get_env("COMBINE_DISCARDED_LOG_LEVEL", "DEBUG"),
            unhandled_status=_get_env("COMBINE_UNHANDLED_STATUS", 404, int),
        )


def load_config(env_file: Optional[Path] = None) -> CombineConfig:
    """Load a ``.env`` file if present, then build config from the environment."""
    path = Path(env_file or _get_env("COMBINE_ENV_FILE", DEFAULT_ENV_FILE))
    if path.exists():
        load_dotenv(path, override=False)
        logger.debug(f"Loaded .env from {path}")
    return CombineConfig.from_env()


_config: Optional[CombineConfig] = None


def get_config() -> CombineConfig:
    """Get the cached configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reset_config() -> None:
    """Reset the cached configuration (for testing)."""
    global _config
    _config = None
