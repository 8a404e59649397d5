"""Tests for utils/api_client.py — request shaping and error mapping."""
from unittest.mock import MagicMock

import pytest
import requests

from utils.api_client import ApiClient, ApiError, SessionExpired, as_list, unwrap


def make_response(status_code=200, payload=None, content=None):
    response = MagicMock()
    response.status_code = status_code
    if content is None:
        content = b'' if payload is None else b'{}'
    response.content = content
    if payload is None:
        response.json.side_effect = ValueError('no json')
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


class TestRequest:
    def test_bearer_token_and_url(self, http):
        http.request.return_value = make_response(payload={'ok': True})
        client = ApiClient('https://backend.test/api/', token='abc', timeout=5, http=http)

        assert client.get('/orders/my-orders') == {'ok': True}

        method, url = http.request.call_args.args
        kwargs = http.request.call_args.kwargs
        assert method == 'GET'
        assert url == 'https://backend.test/api/orders/my-orders'
        assert kwargs['headers']['Authorization'] == 'Bearer abc'
        assert kwargs['timeout'] == 5

    def test_no_token_no_authorization_header(self, http):
        http.request.return_value = make_response(payload=[])
        ApiClient('https://backend.test/api', http=http).get('/fuel-prices')
        assert 'Authorization' not in http.request.call_args.kwargs['headers']

    def test_empty_params_dropped(self, http):
        http.request.return_value = make_response(payload=[])
        client = ApiClient('https://backend.test/api', http=http)
        client.get('/support', params={'status': None})
        assert http.request.call_args.kwargs['params'] is None

        client.get('/orders', params={'status': 'pending', 'q': ''})
        assert http.request.call_args.kwargs['params'] == {'status': 'pending'}

    def test_json_body_forwarded(self, http):
        http.request.return_value = make_response(payload={'valid': True})
        ApiClient('https://backend.test/api', http=http).post(
            '/orders/verify', json={'qrData': 'ORD-1'})
        assert http.request.call_args.kwargs['json'] == {'qrData': 'ORD-1'}

    def test_empty_body_is_none(self, http):
        http.request.return_value = make_response(status_code=204)
        assert ApiClient('https://backend.test/api', http=http).put('/notifications/read-all') is None


class TestErrors:
    def test_server_message_wins(self, http):
        http.request.return_value = make_response(400, {'message': 'Insufficient points'})
        client = ApiClient('https://backend.test/api', token='t', http=http)
        with pytest.raises(ApiError) as exc:
            client.post('/rewards/redeem', json={}, fallback='Failed to submit request')
        assert exc.value.message == 'Insufficient points'
        assert exc.value.status_code == 400

    def test_fallback_when_no_message(self, http):
        http.request.return_value = make_response(500, content=b'<html>oops</html>')
        client = ApiClient('https://backend.test/api', token='t', http=http)
        with pytest.raises(ApiError) as exc:
            client.get('/orders', fallback='Failed to fetch orders')
        assert exc.value.message == 'Failed to fetch orders'
        assert exc.value.status_code == 500

    def test_network_error_uses_fallback(self, http):
        http.request.side_effect = requests.ConnectionError('refused')
        client = ApiClient('https://backend.test/api', http=http)
        with pytest.raises(ApiError) as exc:
            client.get('/fuel-prices', fallback='Failed to fetch fuel prices')
        assert exc.value.message == 'Failed to fetch fuel prices'
        assert exc.value.status_code is None

    def test_401_with_token_is_session_expired(self, http):
        http.request.return_value = make_response(401, {'message': 'jwt expired'})
        client = ApiClient('https://backend.test/api', token='stale', http=http)
        with pytest.raises(SessionExpired):
            client.get('/auth/profile')

    def test_401_without_token_is_api_error(self, http):
        http.request.return_value = make_response(401, {'message': 'Invalid credentials'})
        client = ApiClient('https://backend.test/api', http=http)
        with pytest.raises(ApiError) as exc:
            client.post('/auth/login', json={}, fallback='Login failed')
        assert exc.value.message == 'Invalid credentials'


class TestShapes:
    def test_as_list_bare(self):
        assert as_list([1, 2]) == [1, 2]

    def test_as_list_wrapped(self):
        assert as_list({'orders': [{'_id': 'a'}]}, 'orders', 'data') == [{'_id': 'a'}]
        assert as_list({'data': [1]}) == [1]

    def test_as_list_garbage(self):
        assert as_list(None) == []
        assert as_list({'orders': 'nope'}, 'orders') == []

    def test_unwrap(self):
        assert unwrap({'order': {'_id': 'x'}}, 'order', 'data') == {'_id': 'x'}
        assert unwrap({'_id': 'x'}, 'order', 'data') == {'_id': 'x'}
