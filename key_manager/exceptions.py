from __future__ import annotations
from typing import Any, Optional


class ApiRequestError(Exception):
    """Base class for every error raised while talking to the keys API."""


class ConfigurationError(ApiRequestError):
    """Required credential or setting is missing; raised before any request."""


class ApiTransportError(ApiRequestError):
    """The request could not be sent or the response never arrived."""
    status_code = None


class ApiResponseDecodeError(ApiRequestError):
    """Server answered 2xx but the body is not valid JSON."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ApiHttpError(ApiRequestError):
    """Non-2xx response. Carries the status code and the parsed error body (or None)."""

    def __init__(self, message: str, status_code: int, error_data: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_data = error_data


class ApiAuthError(ApiHttpError):
    """Authentication or authorization failure (401/403)."""


class ApiRateLimitError(ApiHttpError):
    """Rate limiting encountered (429)."""
