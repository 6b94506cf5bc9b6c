from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .client import ConfigurationError, build_api_url

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1"
DEFAULT_PORT = 8181
DEFAULT_TIMEOUT = 5


def validate_url(url: str, name: str) -> str:
    """Validate that a URL is properly formatted."""
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(
                f"Invalid {name}: '{url}'. Must include scheme and host (e.g., http://localhost)"
            )
        return url.rstrip("/")
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {e}") from e


def validate_port(port: int, name: str) -> int:
    """Validate that a port number is in valid range."""
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"Invalid {name}: {port}. Must be between 1 and 65535")
    return port


def validate_positive_int(value: int, name: str, min_val: int = 1) -> int:
    """Validate that a value is a positive integer."""
    if value < min_val:
        raise ConfigurationError(f"Invalid {name}: {value}. Must be >= {min_val}")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: '{raw}'. Must be an integer") from e


@dataclass(frozen=True)
class Config:
    """Settings for one invocation, built once at startup."""

    base_url: str
    port: int
    api_key: str = field(repr=False)
    timeout_s: int = DEFAULT_TIMEOUT
    debug: bool = False

    @property
    def api_url(self) -> str:
        return build_api_url(self.base_url, self.port)

    @classmethod
    def from_env(cls, debug: bool = False) -> Config:
        """Build and validate a Config from TAUTULLI_* environment variables.

        Raises:
            ConfigurationError: if any setting is missing or malformed.
        """
        base_url = validate_url(os.getenv("TAUTULLI_URL", DEFAULT_URL), "TAUTULLI_URL")
        port = validate_port(_int_env("TAUTULLI_PORT", DEFAULT_PORT), "TAUTULLI_PORT")
        timeout_s = validate_positive_int(
            _int_env("TAUTULLI_TIMEOUT", DEFAULT_TIMEOUT), "TAUTULLI_TIMEOUT", min_val=1
        )

        api_key = (os.getenv("TAUTULLI_API_KEY") or "").strip()
        if not api_key:
            raise ConfigurationError(
                "API key is required. Set TAUTULLI_API_KEY in the environment or in a .env file."
            )

        config = cls(
            base_url=base_url,
            port=port,
            api_key=api_key,
            timeout_s=timeout_s,
            debug=debug,
        )
        logger.info(
            "Configuration validated: api_url=%s, timeout=%ds, debug=%s",
            config.api_url,
            config.timeout_s,
            config.debug,
        )
        return config
