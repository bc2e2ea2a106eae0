"""Client and CLI for the OpenRouter API key provisioning endpoints.

Usage example:
    from key_manager import KeysClient, Settings
    client = KeysClient(Settings.from_env())
    keys = client.list_keys()
"""
from .client import KeysClient, UNSET  # noqa: F401
from .config import Settings  # noqa: F401
from .exceptions import (  # noqa: F401
    ApiAuthError,
    ApiHttpError,
    ApiRateLimitError,
    ApiRequestError,
    ApiResponseDecodeError,
    ApiTransportError,
    ConfigurationError,
)
