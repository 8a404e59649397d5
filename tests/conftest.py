"""Shared fixtures: a Flask test client talking to a scripted backend."""
import pytest

from utils.api_client import ApiClient, ApiError


class FakeClient(ApiClient):
    """ApiClient that answers from a table instead of the network.

    `responses` maps (METHOD, path) to a payload, an exception to raise,
    or a callable receiving the recorded call.
    """

    def __init__(self, responses=None):
        super().__init__('http://backend.test/api', token='test-token')
        self.responses = dict(responses or {})
        self.calls = []

    def request(self, method, path, *, params=None, json=None, fallback='Request failed'):
        call = {'method': method, 'path': path, 'params': params, 'json': json}
        self.calls.append(call)
        answer = self.responses.get((method, path))
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(call)
        return answer

    def called(self, method, path):
        return [c for c in self.calls if c['method'] == method and c['path'] == path]


FUEL_PRICES = [
    {'_id': 'p1', 'fuelType': 'petrol', 'pricePerLiter': 100.0},
    {'_id': 'p2', 'fuelType': 'diesel', 'pricePerLiter': 90.0},
    {'_id': 'p3', 'fuelType': 'cng', 'pricePerLiter': 75.0},
]

CUSTOMER = {'_id': 'u-cust-1234', 'name': 'Asha Rao', 'email': 'asha@example.com',
            'role': 'customer', 'availablePoints': 500, 'totalPoints': 1200}

ADMIN = {'_id': 'u-admin-1', 'name': 'Station Admin', 'email': 'admin@example.com',
         'role': 'admin'}


@pytest.fixture
def fake_api(monkeypatch):
    fake = FakeClient({('GET', '/fuel-prices'): list(FUEL_PRICES)})
    monkeypatch.setattr('utils.fuel_api.get_api_client', lambda: fake)
    return fake


@pytest.fixture
def app():
    from app import create_app
    flask_app = create_app()
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app, fake_api):
    return app.test_client()


def _login(client, user):
    with client.session_transaction() as sess:
        sess['token'] = 'test-token'
        sess['user'] = dict(user)
    return client


@pytest.fixture
def customer_client(client):
    return _login(client, CUSTOMER)


@pytest.fixture
def admin_client(client):
    return _login(client, ADMIN)


def flashes(client):
    with client.session_transaction() as sess:
        return [message for _, message in sess.get('_flashes', [])]


def backend_error(message, status_code=400):
    return ApiError(message, status_code=status_code)
