import pytest

from key_manager.base_client import EmptyResponse
from key_manager.config import Settings
from key_manager.exceptions import ApiHttpError, ConfigurationError
from conftest import PROVISIONING, REGULAR, make_response

CREATED = {'key': 'sk-or-v1-new', 'data': {'hash': 'abc', 'name': 'dev', 'limit': None}}


def test_create_with_null_limit_sends_null(make_client):
    client = make_client(make_response(201, CREATED))
    result = client.create_key('dev', limit=None)
    body = client.session.calls[0]['json']
    assert 'limit' in body and body['limit'] is None
    assert 'label' not in body
    assert result['key'] == 'sk-or-v1-new'


def test_create_with_omitted_limit_omits_field(make_client):
    client = make_client(make_response(201, CREATED))
    client.create_key('  dev  ')
    assert client.session.calls[0]['json'] == {'name': 'dev'}
    assert client.session.calls[0]['method'] == 'POST'


def test_create_with_label_and_limit(make_client):
    client = make_client(make_response(201, CREATED))
    client.create_key('dev', label='ci', limit=12.5)
    assert client.session.calls[0]['json'] == {'name': 'dev', 'label': 'ci', 'limit': 12.5}


@pytest.mark.parametrize('limit', [-1, 'ten', True, float('nan')])
def test_create_rejects_bad_limit_before_request(make_client, limit):
    client = make_client()
    with pytest.raises(ValueError):
        client.create_key('dev', limit=limit)
    assert client.session.calls == []


@pytest.mark.parametrize('name', ['', '   ', None])
def test_create_requires_name(make_client, name):
    client = make_client()
    with pytest.raises(ValueError):
        client.create_key(name)
    assert client.session.calls == []


def test_update_with_no_fields_makes_no_request(make_client):
    client = make_client()
    assert client.update_key('abc', {}) is None
    assert client.session.calls == []


def test_update_sends_patch_and_unwraps_data(make_client):
    client = make_client(make_response(200, {'data': {'hash': 'abc', 'disabled': True}}))
    record = client.update_key(' abc ', {'disabled': True, 'label': None})
    call = client.session.calls[0]
    assert call['method'] == 'PATCH'
    assert call['url'].endswith('/keys/abc')
    assert call['json'] == {'disabled': True, 'label': None}
    assert record == {'hash': 'abc', 'disabled': True}


def test_update_rejects_unknown_fields(make_client):
    client = make_client()
    with pytest.raises(ValueError, match='usage'):
        client.update_key('abc', {'usage': 0})
    assert client.session.calls == []


def test_update_rejects_non_boolean_disabled(make_client):
    client = make_client()
    with pytest.raises(ValueError):
        client.update_key('abc', {'disabled': 'yes'})


def test_get_key_strips_hash_and_unwraps(make_client):
    client = make_client(make_response(200, {'data': {'hash': 'abc'}}))
    assert client.get_key('  abc ') == {'hash': 'abc'}
    assert client.session.calls[0]['url'] == 'https://openrouter.ai/api/v1/keys/abc'


@pytest.mark.parametrize('key_hash,encoded', [
    ('a/b', 'a%2Fb'),
    ('a?x=1#f', 'a%3Fx%3D1%23f'),
    ('ab cd', 'ab%20cd'),
])
def test_key_hash_is_percent_encoded_in_path(make_client, key_hash, encoded):
    client = make_client(
        make_response(200, {'data': {}}),
        make_response(200, {'data': {}}),
        make_response(204),
    )
    client.get_key(key_hash)
    client.update_key(key_hash, {'disabled': True})
    client.delete_key(key_hash)
    for call in client.session.calls:
        assert call['url'] == f'https://openrouter.ai/api/v1/keys/{encoded}'


@pytest.mark.parametrize('key_hash', ['.', ' .. '])
def test_dot_segment_hash_is_rejected(make_client, key_hash):
    client = make_client()
    with pytest.raises(ValueError):
        client.get_key(key_hash)
    with pytest.raises(ValueError):
        client.delete_key(key_hash)
    assert client.session.calls == []


def test_get_key_without_wrapper_returns_body(make_client):
    client = make_client(make_response(200, {'hash': 'abc'}))
    assert client.get_key('abc') == {'hash': 'abc'}


def test_delete_with_204_returns_empty(make_client):
    client = make_client(make_response(204))
    result = client.delete_key('abc')
    assert isinstance(result, EmptyResponse)
    assert not result
    assert client.session.calls[0]['method'] == 'DELETE'


def test_delete_with_body_returns_record(make_client):
    client = make_client(make_response(200, {'data': {'hash': 'abc'}}))
    assert client.delete_key('abc') == {'hash': 'abc'}


def test_delete_propagates_api_error(make_client):
    client = make_client(make_response(404, {'error': {'message': 'not found'}}))
    with pytest.raises(ApiHttpError) as exc:
        client.delete_key('abc')
    assert exc.value.status_code == 404


def test_check_limit_uses_regular_key(make_client):
    client = make_client(make_response(200, {'data': {'limit': 5, 'usage': 1.25}}))
    assert client.check_key_limit() == {'limit': 5, 'usage': 1.25}
    call = client.session.calls[0]
    assert call['url'].endswith('/auth/key')
    assert call['headers']['Authorization'] == f'Bearer {REGULAR}'


def test_check_limit_override_wins(make_client):
    client = make_client(make_response(200, {'data': {}}))
    client.check_key_limit('sk-or-v1-other')
    assert client.session.calls[0]['headers']['Authorization'] == 'Bearer sk-or-v1-other'


def test_check_limit_override_works_without_regular_key(make_client):
    client = make_client(make_response(200, {'data': {}}), settings_override=Settings(provisioning_api_key=PROVISIONING))
    client.check_key_limit('sk-or-v1-other')
    assert len(client.session.calls) == 1


def test_check_limit_without_any_key_fails_before_request(make_client):
    client = make_client(settings_override=Settings(provisioning_api_key=PROVISIONING))
    with pytest.raises(ConfigurationError, match='OPENROUTER_API_KEY'):
        client.check_key_limit()
    assert client.session.calls == []


@pytest.mark.parametrize('operation', [
    lambda c: c.list_keys(),
    lambda c: c.get_key('abc'),
    lambda c: c.create_key('dev'),
    lambda c: c.update_key('abc', {'name': 'x'}),
    lambda c: c.update_key('abc', {}),
    lambda c: c.delete_key('abc'),
])
def test_management_operations_require_provisioning_key(make_client, operation):
    client = make_client(settings_override=Settings(api_key=REGULAR))
    with pytest.raises(ConfigurationError, match='PROVISIONING_API_KEY'):
        operation(client)
    assert client.session.calls == []
