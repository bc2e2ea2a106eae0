"""Operator-facing descriptions of failed operations.

Classification is advisory: nothing here changes what the client raises or
returns, it only turns an exception into something worth printing.
"""
from __future__ import annotations
import enum
import json
from typing import Optional

from .exceptions import (
    ApiHttpError,
    ApiRequestError,
    ApiResponseDecodeError,
    ApiTransportError,
    ConfigurationError,
)


class ErrorCategory(enum.Enum):
    BAD_REQUEST = 'malformed input'
    AUTH = 'authentication/authorization failure'
    NOT_FOUND = 'resource not found'
    RATE_LIMITED = 'rate limited'
    UPSTREAM = 'upstream service failure'
    API = 'API failure'


HINTS = {
    ErrorCategory.BAD_REQUEST: 'Bad Request. Please check the data you provided (e.g., name format, limit value).',
    ErrorCategory.AUTH: (
        'Authentication/Authorization failed. Please check if your API key (Provisioning or Regular) '
        'is correct, valid, and has the necessary permissions for this operation.'
    ),
    ErrorCategory.NOT_FOUND: 'The requested resource (e.g., key hash) was not found.',
    ErrorCategory.RATE_LIMITED: 'Rate limit exceeded. Please wait a bit before trying again.',
    ErrorCategory.UPSTREAM: 'The OpenRouter server encountered an error. Please try again later.',
}

# categories whose error body is worth showing next to the hint
_SHOW_DETAILS = {ErrorCategory.BAD_REQUEST, ErrorCategory.NOT_FOUND, ErrorCategory.UPSTREAM, ErrorCategory.API}


def classify_status(status_code: int) -> ErrorCategory:
    if status_code == 400:
        return ErrorCategory.BAD_REQUEST
    if status_code in (401, 403):
        return ErrorCategory.AUTH
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if status_code in (500, 502, 503, 504):
        return ErrorCategory.UPSTREAM
    return ErrorCategory.API


def describe_error(error: BaseException, context: Optional[str] = None) -> str:
    """Multi-line description of ``error`` for the console."""
    prefix = 'Error'
    if context:
        prefix += f" while {context}"
    if isinstance(error, ApiHttpError):
        category = classify_status(error.status_code)
        lines = [f"{prefix}: {error}"]
        hint = HINTS.get(category)
        if hint:
            lines.append(f"-> {hint}")
        if error.error_data and category in _SHOW_DETAILS:
            details = json.dumps(error.error_data, indent=2, ensure_ascii=False)
            lines.append('   API Error Details: ' + details.replace('\n', '\n   '))
        return '\n'.join(lines)
    if isinstance(error, ApiTransportError):
        return f"{prefix}: could not reach the API ({error})"
    if isinstance(error, ApiResponseDecodeError):
        return f"{prefix}: the API answered {error.status_code} but the response was not valid JSON ({error})"
    if isinstance(error, ConfigurationError):
        return f"{prefix}: configuration problem: {error}"
    if isinstance(error, ValueError):
        return f"{prefix}: invalid input: {error}"
    if isinstance(error, ApiRequestError):
        return f"{prefix}: {error}"
    return f"{prefix}: unexpected error: {error}"

