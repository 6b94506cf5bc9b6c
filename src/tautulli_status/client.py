from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)


class TautulliError(Exception):
    """Base exception for Tautulli status errors."""

    pass


class ConfigurationError(TautulliError):
    """Raised when configuration is invalid."""

    pass


class ConnectivityError(TautulliError):
    """Raised when Tautulli cannot be reached or gives no usable data."""

    pass


class APIError(ConnectivityError):
    """Raised when Tautulli answers with a non-success HTTP status."""

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class InvalidResponseError(ConnectivityError):
    """Raised when the response is not a usable activity payload."""

    pass


def build_api_url(base_url: str, port: int) -> str:
    """Compose the v2 API endpoint, forcing ``port`` onto the host."""
    parts = urlsplit(base_url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{port}"
    path = parts.path.rstrip("/") + "/api/v2"
    return urlunsplit((parts.scheme, netloc, path, "", ""))


class TautulliClient:
    def __init__(
        self,
        base_url: str,
        port: int,
        api_key: str,
        timeout_s: int = 5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.port = port
        self.api_key = api_key
        self.timeout_s = timeout_s

        if not self.base_url:
            raise ConfigurationError("base_url is required")

        if not self.api_key:
            raise ConfigurationError("api_key is required")

        if timeout_s <= 0:
            raise ConfigurationError(f"timeout_s must be positive, got {timeout_s}")

        self.api_url = build_api_url(self.base_url, self.port)

        logger.debug(
            "TautulliClient initialized: api_url=%s, timeout=%ds",
            self.api_url,
            self.timeout_s,
        )

    @classmethod
    def from_config(cls, config: Config) -> TautulliClient:
        return cls(
            base_url=config.base_url,
            port=config.port,
            api_key=config.api_key,
            timeout_s=config.timeout_s,
        )

    def _request(self, cmd: str, **params: str) -> requests.Response:
        query = {"apikey": self.api_key, "cmd": cmd, **params}
        logger.info("Tautulli request: GET %s cmd=%s params=%s", self.api_url, cmd, params or None)

        try:
            response = requests.get(self.api_url, params=query, timeout=self.timeout_s)
        except Timeout as e:
            logger.error("Request timeout after %ds: cmd=%s", self.timeout_s, cmd)
            raise ConnectivityError(
                f"Request to Tautulli timed out after {self.timeout_s}s. "
                "Consider increasing TAUTULLI_TIMEOUT or check network connectivity."
            ) from e
        except RequestsConnectionError as e:
            logger.error("Connection error: cmd=%s - %s", cmd, e)
            raise ConnectivityError(
                f"Failed to connect to Tautulli at {self.base_url}:{self.port}. "
                "Verify the URL and port and that Tautulli is running."
            ) from e
        except RequestException as e:
            logger.error("Request error: cmd=%s - %s", cmd, e)
            raise ConnectivityError(f"Request failed: {e}") from e

        if not response.ok:
            logger.error(
                "Tautulli API error: cmd=%s -> HTTP %d: %s",
                cmd,
                response.status_code,
                response.text[:200],
            )

            if response.status_code in (401, 403):
                raise APIError(
                    "Tautulli rejected the request. Verify TAUTULLI_API_KEY.",
                    status_code=response.status_code,
                    response_text=response.text,
                )
            elif response.status_code == 404:
                raise APIError(
                    f"API endpoint not found at {self.api_url}. Verify TAUTULLI_URL and TAUTULLI_PORT.",
                    status_code=404,
                    response_text=response.text,
                )
            elif response.status_code >= 500:
                raise APIError(
                    f"Tautulli server error (HTTP {response.status_code}). "
                    "Check the Tautulli logs for details.",
                    status_code=response.status_code,
                    response_text=response.text,
                )
            else:
                raise APIError(
                    f"API request failed (HTTP {response.status_code}): {response.text}",
                    status_code=response.status_code,
                    response_text=response.text,
                )

        logger.debug("Request successful: cmd=%s -> HTTP %d", cmd, response.status_code)
        return response

    def fetch_activity(self) -> bytes:
        """Return the raw body of a ``get_activity`` call."""
        return self._request("get_activity").content
