import pytest
import requests
from yotpo_client.mock_provider import make_response
from yotpo_client.transport import HttpTransport


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.response

    def close(self):
        pass


def test_request_passes_options_and_timeout():
    session = FakeSession(make_response(200, {'ok': True}))
    transport = HttpTransport(timeout=12, session=session)
    resp = transport.request('post', 'https://api.yotpo.com/x', headers={'A': '1'}, params={'page': 1}, data='{}')
    assert resp.json() == {'ok': True}
    method, url, kwargs = session.calls[0]
    assert method == 'POST'
    assert kwargs == {'params': {'page': 1}, 'headers': {'A': '1'}, 'data': '{}', 'timeout': 12}


def test_error_status_raises_http_error_with_response():
    session = FakeSession(make_response(503, {'status': {'message': 'down'}}))
    with pytest.raises(requests.HTTPError) as exc:
        HttpTransport(session=session).request('GET', 'https://api.yotpo.com/x')
    assert exc.value.response.status_code == 503
