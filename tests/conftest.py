import json

import pytest
import requests

from key_manager.client import KeysClient
from key_manager.config import Settings

PROVISIONING = 'sk-or-v1-prov-test'
REGULAR = 'sk-or-v1-regular-test'


def make_response(status=200, body=None, raw=None, reason='OK'):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp.encoding = 'utf-8'
    if raw is not None:
        resp._content = raw.encode('utf-8')
    elif body is not None:
        resp._content = json.dumps(body).encode('utf-8')
        resp.headers['Content-Type'] = 'application/json'
    else:
        resp._content = b''
    return resp


class FakeSession:
    """Stands in for requests.Session: replays queued responses and records calls."""

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append(dict(kwargs, method=method, url=url))
        if not self.responses:
            raise AssertionError(f'unexpected request #{len(self.calls)}: {method} {url}')
        nxt = self.responses.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt


@pytest.fixture
def settings():
    return Settings(provisioning_api_key=PROVISIONING, api_key=REGULAR)


@pytest.fixture
def make_client(settings):
    def _make(*responses, settings_override=None):
        client = KeysClient(settings_override or settings)
        client.session = FakeSession(responses)
        return client
    return _make
