"""DirectusClient is a Python client for the Directus 6 REST API.

It provides typed methods for the Directus resources (items, files, tables,
columns, groups, privileges, preferences, messages, activity, bookmarks,
settings and users), bearer-token authentication, and uniform error
normalization for GET, POST, PUT and DELETE requests.
"""

import importlib.metadata

from directusclient.exceptions import (
    # Base exceptions
    DirectusError,
    DirectusClientClosed,
    # Caller errors
    ConfigError,
    MissingParameterError,
    TypeMismatchError,
    # Remote rejections
    RemoteRejection,
    DirectusBadRequestError,
    DirectusAuthenticationError,
    DirectusPermissionError,
    DirectusNotFoundError,
    DirectusConflictError,
    DirectusValidationError,
    DirectusRateLimitError,
    DirectusServerError,
    DirectusServiceUnavailableError,
    # Transport errors
    TransportError,
    DirectusUnavailableError,
    DirectusTimeoutError,
    DirectusProtocolError,
)
from directusclient.DirectusClient import DirectusClient
from directusclient._httpx import DirectusAuth, DirectusConnectionParameters
from directusclient.catalog import CATALOG, Operation

__version__ = importlib.metadata.version("directusclient")
__all__ = [
    # Core client
    "DirectusClient",
    # Directus Auth Components
    "DirectusAuth",
    "DirectusConnectionParameters",
    # Operation catalog
    "CATALOG",
    "Operation",
    # Base exceptions
    "DirectusError",
    "DirectusClientClosed",
    # Caller errors
    "ConfigError",
    "MissingParameterError",
    "TypeMismatchError",
    # Remote rejections
    "RemoteRejection",
    "DirectusBadRequestError",
    "DirectusAuthenticationError",
    "DirectusPermissionError",
    "DirectusNotFoundError",
    "DirectusConflictError",
    "DirectusValidationError",
    "DirectusRateLimitError",
    "DirectusServerError",
    "DirectusServiceUnavailableError",
    # Transport errors
    "TransportError",
    "DirectusUnavailableError",
    "DirectusTimeoutError",
    "DirectusProtocolError",
]
