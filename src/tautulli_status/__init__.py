from .client import (
    APIError,
    ConfigurationError,
    ConnectivityError,
    InvalidResponseError,
    TautulliClient,
    TautulliError,
)
from .config import Config
from .main import main
from .sessions import Activity, DisplaySession, extract_activity

__all__ = [
    "main",
    "Config",
    "TautulliClient",
    "TautulliError",
    "ConfigurationError",
    "ConnectivityError",
    "APIError",
    "InvalidResponseError",
    "Activity",
    "DisplaySession",
    "extract_activity",
]
