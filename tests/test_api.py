import json
import logging
import pytest
import requests
from yotpo_client.api import TOKEN_HEADER, YotpoApi
from yotpo_client.cache import MemoryCache
from yotpo_client.exceptions import ApiAuthError, ApiRateLimitError, ApiRequestError, map_status_error
from yotpo_client.mock_provider import make_response


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class QueueTransport:
    """Answers requests from a queue of responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, *, headers=None, params=None, data=None):
        self.calls.append({'method': method, 'url': url, 'headers': headers, 'params': params, 'data': data})
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        resp.raise_for_status()
        return resp


def _api(*responses, **kwargs):
    transport = QueueTransport(*responses)
    kwargs.setdefault('clock', Clock())
    api = YotpoApi('store-key', 'store-secret', transport=transport, **kwargs)
    return api, transport


def test_url_and_default_headers():
    api, transport = _api(make_response(200, {'ok': True}), additional_headers={'X-Store': 'eu'})
    assert api.call_api('products') == {'ok': True}
    call = transport.calls[0]
    assert call['method'] == 'GET'
    assert call['url'] == 'https://api.yotpo.com/core/v3/stores/store-key/products'
    assert call['headers'] == {'Content-Type': 'application/json', 'Accept': 'application/json', 'X-Store': 'eu'}


def test_reviews_resource_type_uses_apps_base():
    api, transport = _api(make_response(200, {}))
    api.call_api('bottom_lines', options={'query': {'page': 1}}, resource_type='reviews')
    assert transport.calls[0]['url'] == 'https://api.yotpo.com/v1/apps/store-key/bottom_lines'
    assert transport.calls[0]['params'] == {'page': 1}


def test_unknown_resource_type():
    api, transport = _api()
    with pytest.raises(ValueError):
        api.call_api('products', resource_type='orders')
    assert transport.calls == []


def test_access_token_is_memoized():
    api, transport = _api(make_response(200, {'access_token': 'tok-1'}))
    assert api.get_access_token() == 'tok-1'
    assert api.get_access_token() == 'tok-1'
    assert len(transport.calls) == 1
    call = transport.calls[0]
    assert call['method'] == 'POST'
    assert call['url'].endswith('/store-key/access_tokens')
    assert TOKEN_HEADER not in call['headers']
    assert json.loads(call['data']) == {'secret': 'store-secret'}


def test_missing_access_token_field_gives_empty_string():
    api, _ = _api(make_response(200, {'status': 'ok'}))
    assert api.get_access_token() == ''


def test_token_header_attached_only_when_requested():
    api, transport = _api(make_response(200, {'access_token': 'tok-1'}), make_response(200, {}), make_response(200, {}))
    api.call_api('products', access_token=True)
    api.call_api('products')
    assert transport.calls[1]['headers'][TOKEN_HEADER] == 'tok-1'
    assert TOKEN_HEADER not in transport.calls[2]['headers']


def test_reset_access_token_fetches_again():
    api, transport = _api(make_response(200, {'access_token': 'old'}), make_response(200, {'access_token': 'new'}))
    api.get_access_token()
    api.reset_access_token()
    assert api.get_access_token() == 'new'
    assert len(transport.calls) == 2


def test_valid_cache_entry_skips_network():
    clock = Clock()
    cache = MemoryCache(clock)
    cache.set('page-1', '{"cached": true}', clock.now + 60)
    api, transport = _api(cache=cache, clock=clock)
    assert api.call_api('bottom_lines', resource_type='reviews', cache=True, cache_key='page-1', cache_ttl=300) == {'cached': True}
    assert transport.calls == []


def test_expired_cache_entry_goes_to_network_and_is_rewritten():
    clock = Clock()
    cache = MemoryCache(clock)
    cache.set('page-1', '{"cached": true}', clock.now - 1)
    api, transport = _api(make_response(200, {'fresh': True}), cache=cache, clock=clock)
    assert api.call_api('bottom_lines', resource_type='reviews', cache=True, cache_key='page-1', cache_ttl=300) == {'fresh': True}
    assert len(transport.calls) == 1
    entry = cache.get('page-1')
    assert entry.expires_at == clock.now + 300
    assert json.loads(entry.payload) == {'fresh': True}


def test_empty_cached_payload_is_a_miss():
    clock = Clock()
    cache = MemoryCache(clock)
    cache.set('k', '', clock.now + 60)
    api, transport = _api(make_response(200, {'fresh': True}), cache=cache, clock=clock)
    assert api.call_api('products', cache=True, cache_key='k') == {'fresh': True}
    assert len(transport.calls) == 1


def test_uncached_calls_do_not_touch_cache():
    cache = MemoryCache(Clock())
    api, _ = _api(make_response(200, {'a': 1}), cache=cache)
    api.call_api('products')
    assert cache._entries == {}


def test_cached_call_requires_key():
    api, _ = _api()
    with pytest.raises(ValueError):
        api.call_api('bottom_lines', cache=True)


@pytest.mark.parametrize('body', [b'', b'not json', b'[1, 2]'])
def test_lenient_decode(body):
    resp = make_response(200, None)
    resp._content = body
    api, _ = _api(resp)
    assert api.call_api('products') == {}


def test_http_error_reraised_unchanged_by_default(caplog):
    caplog.set_level(logging.ERROR, logger='yotpo_client.api')
    api, _ = _api(make_response(404, {'status': {'code': 404, 'message': 'Not Found'}}))
    with pytest.raises(requests.HTTPError):
        api.call_api('products/9')
    assert 'Failed products/9. Exception:' in caplog.text


def test_error_mapper_receives_decoded_error_body():
    seen = []

    def mapper(exc, error_response):
        seen.append((exc, error_response))
        return ApiRequestError('mapped', 422, error_response)

    api, _ = _api(make_response(422, {'errors': ['bad price']}), error_mapper=mapper)
    with pytest.raises(ApiRequestError) as exc:
        api.call_api('products', 'POST', {'body': '{}'})
    assert isinstance(seen[0][0], requests.HTTPError)
    assert seen[0][1] == {'errors': ['bad price']}
    assert isinstance(exc.value.__cause__, requests.HTTPError)


def test_status_mapper_classifies_auth_errors():
    api, _ = _api(make_response(401, {'status': {'code': 401, 'message': 'Unauthorized'}}), error_mapper=map_status_error)
    with pytest.raises(ApiAuthError) as exc:
        api.call_api('access_tokens', 'POST')
    assert exc.value.status_code == 401
    assert 'Unauthorized' in str(exc.value)


def test_transport_failure_propagates_unchanged(caplog):
    caplog.set_level(logging.ERROR, logger='yotpo_client.api')
    boom = requests.ConnectionError('connection refused')
    api, _ = _api(boom, error_mapper=map_status_error)
    with pytest.raises(requests.ConnectionError) as exc:
        api.call_api('products')
    assert exc.value is boom
    assert 'Failed products. Exception: connection refused' in caplog.text


@pytest.mark.parametrize('status, expected', [(403, ApiAuthError), (429, ApiRateLimitError), (500, ApiRequestError), (400, ApiRequestError)])
def test_map_status_error(status, expected):
    resp = make_response(status, {'errors': ['x']})
    err = map_status_error(requests.HTTPError('failed', response=resp), {'errors': ['x']})
    assert type(err) is expected
    assert err.status_code == status
    assert err.error_response == {'errors': ['x']}


def test_empty_access_token_is_requested_again():
    api, transport = _api(make_response(200, {}), make_response(200, {'access_token': 'tok'}))
    assert api.get_access_token() == ''
    assert api.get_access_token() == 'tok'
    assert api.get_access_token() == 'tok'
    assert len(transport.calls) == 2


@pytest.mark.parametrize('body', [b'', b'<html>Bad Gateway</html>'])
def test_status_mapper_with_non_json_error_body(body):
    resp = make_response(502, None)
    resp._content = body
    seen = []

    def mapper(exc, error_response):
        seen.append(error_response)
        return map_status_error(exc, error_response)

    api, _ = _api(resp, error_mapper=mapper)
    with pytest.raises(ApiRequestError) as exc:
        api.call_api('products')
    assert seen == [None]
    assert exc.value.status_code == 502
    assert exc.value.error_response is None
    assert str(exc.value) == f"Server error 502: {body.decode()}"
