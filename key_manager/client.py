from __future__ import annotations
import logging
import math
import numbers
from typing import Any, Dict, Iterator, List, Mapping, Optional
from urllib.parse import quote
from .base_client import BaseClient
from .config import Settings

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
UPDATABLE_FIELDS = ('name', 'label', 'limit', 'disabled')


class _Unset:
    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


# Marks an argument the caller did not pass, as opposed to an explicit None
UNSET: Any = _Unset()


def _unwrap(result: Any) -> Any:
    if isinstance(result, dict) and result.get('data') is not None:
        return result['data']
    return result


def _require_text(value: Any, what: str) -> str:
    if not isinstance(value, str) or value.strip() == '':
        raise ValueError(f"Invalid or missing {what}.")
    return value.strip()


def _key_path(key_hash: str) -> str:
    if key_hash in ('.', '..'):
        raise ValueError(f"Invalid key hash {key_hash!r}.")
    return f"/keys/{quote(key_hash, safe='')}"


def _check_limit(limit: Any) -> Optional[float]:
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, numbers.Real) or not math.isfinite(limit) or limit < 0:
        raise ValueError(f"Invalid limit value {limit!r}: use a non-negative number or None for unlimited.")
    return limit


class KeysClient(BaseClient):
    """OpenRouter provisioning API client (API key management)."""

    def __init__(self, settings: Settings, timeout: Optional[float] = None):
        super().__init__(base_url=settings.base_url, timeout=timeout)
        self.settings = settings

    @classmethod
    def from_env(cls) -> 'KeysClient':
        return cls(Settings.from_env())

    def iter_keys(self, page_size: int = PAGE_SIZE, max_pages: Optional[int] = None) -> Iterator[List[Dict[str, Any]]]:
        """Yield pages of key records until a short page ends the collection.

        A response without a ``data`` list stops the walk; pages already
        yielded stand as the result.
        """
        if page_size <= 0:
            raise ValueError('page_size must be positive')
        api_key = self.settings.require_provisioning_key()
        offset = 0
        page = 1
        while max_pages is None or page <= max_pages:
            logger.info('Fetching page %s (offset: %s, limit: %s)', page, offset, page_size)
            data = self._request('GET', '/keys', api_key=api_key, params={'offset': offset, 'limit': page_size})
            items = data.get('data') if isinstance(data, dict) else None
            if not isinstance(items, list):
                logger.warning('Unexpected API response on page %s, stopping fetch: %r', page, data)
                return
            logger.info('Page %s returned %s keys', page, len(items))
            yield items
            if len(items) < page_size:
                return
            offset += page_size
            page += 1

    def list_keys(self, page_size: int = PAGE_SIZE, max_pages: Optional[int] = None) -> List[Dict[str, Any]]:
        keys: List[Dict[str, Any]] = []
        for items in self.iter_keys(page_size=page_size, max_pages=max_pages):
            keys.extend(items)
        return keys

    def get_key(self, key_hash: str) -> Dict[str, Any]:
        api_key = self.settings.require_provisioning_key()
        key_hash = _require_text(key_hash, 'key hash')
        return _unwrap(self._request('GET', _key_path(key_hash), api_key=api_key))

    def check_key_limit(self, api_key: Optional[str] = None) -> Dict[str, Any]:
        """Usage and limit of the key itself (regular credential, or ``api_key`` when given)."""
        key = self.settings.require_api_key(api_key)
        return _unwrap(self._request('GET', '/auth/key', api_key=key))

    def create_key(self, name: str, label: Any = UNSET, limit: Any = UNSET) -> Dict[str, Any]:
        """Create a key. Returns the full response: ``key`` (shown once) and ``data``.

        Leaving ``label``/``limit`` out keeps the service defaults; ``limit=None``
        asks explicitly for an unlimited key.
        """
        api_key = self.settings.require_provisioning_key()
        body: Dict[str, Any] = {'name': _require_text(name, 'key name')}
        if label is not UNSET:
            body['label'] = label
        if limit is not UNSET:
            body['limit'] = _check_limit(limit)
        logger.info('Creating API key %r', body['name'])
        return self._request('POST', '/keys', api_key=api_key, json_body=body)

    def update_key(self, key_hash: str, updates: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        api_key = self.settings.require_provisioning_key()
        key_hash = _require_text(key_hash, 'key hash')
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported update fields: {', '.join(sorted(unknown))}")
        if not updates:
            logger.info('No fields were provided for update')
            return None
        body = dict(updates)
        if 'name' in body:
            body['name'] = _require_text(body['name'], 'key name')
        if 'limit' in body:
            body['limit'] = _check_limit(body['limit'])
        if 'disabled' in body and not isinstance(body['disabled'], bool):
            raise ValueError('disabled must be a boolean')
        return _unwrap(self._request('PATCH', _key_path(key_hash), api_key=api_key, json_body=body))

    def delete_key(self, key_hash: str) -> Dict[str, Any]:
        api_key = self.settings.require_provisioning_key()
        key_hash = _require_text(key_hash, 'key hash')
        return _unwrap(self._request('DELETE', _key_path(key_hash), api_key=api_key))
