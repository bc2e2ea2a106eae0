from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode
import requests
from .exceptions import (
    ApiAuthError,
    ApiHttpError,
    ApiRateLimitError,
    ApiResponseDecodeError,
    ApiTransportError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://openrouter.ai/api/v1'


class EmptyResponse(dict):
    """Result of a 204 No Content response.

    Always empty, so ``result.get('data')`` is None for callers that only look
    for a payload, while ``isinstance(result, EmptyResponse)`` still tells it
    apart from a server-sent ``{}``.
    """

    def __repr__(self) -> str:
        return 'EmptyResponse()'


class BaseClient:
    """Base HTTP client: one authenticated JSON request per call, no retries."""
    BASE_URL: str = DEFAULT_BASE_URL

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.session = requests.Session()
        # None means no timeout; requests waits for the server
        self.timeout = timeout
        if base_url:
            self.BASE_URL = base_url

    def _url(self, path: str) -> str:
        return self.BASE_URL.rstrip('/') + '/' + path.lstrip('/')

    @staticmethod
    def _clean_params(params: Dict[str, Any] | None) -> Dict[str, str]:
        if not params:
            return {}
        return {k: str(v) for k, v in params.items() if v is not None}

    @staticmethod
    def _error_message(resp: requests.Response, error_data: Any) -> str:
        detail = None
        if isinstance(error_data, dict):
            nested = error_data.get('error')
            if isinstance(nested, dict) and nested.get('message'):
                detail = nested['message']
            elif error_data.get('message'):
                detail = error_data['message']
        if detail:
            return f"API Error ({resp.status_code}): {detail}"
        return f"HTTP Error {resp.status_code}: {resp.reason or ''}".rstrip()

    def _raise_for_status(self, resp: requests.Response) -> None:
        if resp.status_code < 400:
            return
        try:
            error_data = resp.json()
        except ValueError:
            logger.warning('Could not parse error response as JSON')
            error_data = None
        message = self._error_message(resp, error_data)
        logger.warning('Request failed: %s', message)
        if resp.status_code in (401, 403):
            raise ApiAuthError(message, resp.status_code, error_data)
        if resp.status_code == 429:
            raise ApiRateLimitError(message, resp.status_code, error_data)
        raise ApiHttpError(message, resp.status_code, error_data)

    def _request(self, method: str, path: str, *, api_key: str, params: Dict[str, Any] | None = None, json_body: Any | None = None) -> Any:
        if not isinstance(path, str) or not path.strip():
            raise ValueError('path must be a non-empty string')
        if not api_key or not str(api_key).strip():
            raise ConfigurationError('API credential is empty')

        url = self._url(path)
        headers = {'Authorization': f"Bearer {api_key}"}
        if json_body is not None:
            headers['Content-Type'] = 'application/json'

        query = self._clean_params(params)
        logger.info('Request: %s %s', method.upper(), url if not query else f"{url}?{urlencode(query)}")
        if json_body is not None:
            logger.debug('Body: %s', json.dumps(json_body))

        try:
            resp = self.session.request(method.upper(), url, params=query or None, headers=headers, json=json_body, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiTransportError(f"Network error: {e}") from e

        self._raise_for_status(resp)

        if resp.status_code == 204:
            logger.info('Response: 204 No Content')
            return EmptyResponse()
        try:
            result = resp.json()
        except ValueError as e:
            raise ApiResponseDecodeError(f"Failed to parse successful response JSON: {e}", resp.status_code) from e
        logger.info('Response: %s %s', resp.status_code, resp.reason or 'OK')
        return result
