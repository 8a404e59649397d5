"""Tests for login, registration and session handling."""
from conftest import CUSTOMER, backend_error, flashes
from utils.api_client import SessionExpired


class TestLogin:
    def test_success_stores_token_and_user(self, client, fake_api):
        fake_api.responses[('POST', '/auth/login')] = dict(CUSTOMER, token='jwt-1')

        resp = client.post('/login', data={'email': 'asha@example.com', 'password': 'secret1'})

        assert resp.status_code == 302
        assert resp.headers['Location'].endswith('/app/dashboard')
        assert fake_api.called('POST', '/auth/login')[0]['json'] == {
            'email': 'asha@example.com', 'password': 'secret1'}
        with client.session_transaction() as sess:
            assert sess['token'] == 'jwt-1'
            assert sess['user']['name'] == 'Asha Rao'
            assert 'token' not in sess['user']
        assert 'Login successful!' in flashes(client)

    def test_server_message_shown(self, client, fake_api):
        fake_api.responses[('POST', '/auth/login')] = backend_error('Invalid credentials', 401)
        resp = client.post('/login', data={'email': 'asha@example.com', 'password': 'bad'})
        assert resp.status_code == 200
        assert b'Invalid credentials' in resp.data

    def test_missing_fields(self, client, fake_api):
        resp = client.post('/login', data={'email': '', 'password': ''})
        assert b'Please enter your email and password' in resp.data
        assert fake_api.calls == []

    def test_response_without_token(self, client, fake_api):
        fake_api.responses[('POST', '/auth/login')] = dict(CUSTOMER)
        resp = client.post('/login', data={'email': 'asha@example.com', 'password': 'x'})
        assert b'Login failed' in resp.data
        with client.session_transaction() as sess:
            assert 'token' not in sess

    def test_logged_in_user_redirected(self, customer_client):
        resp = customer_client.get('/login')
        assert resp.status_code == 302


class TestRegister:
    FORM = {
        'name': 'Ravi Kumar', 'email': 'ravi@example.com', 'phone': '9876543210',
        'vehicle_number': 'KA01AB1234', 'referral_code': 'FUEL-AB12',
        'password': 'secret1', 'confirm_password': 'secret1',
    }

    def test_success(self, client, fake_api):
        fake_api.responses[('POST', '/auth/register')] = {'_id': 'u2', 'name': 'Ravi Kumar',
                                                          'role': 'customer', 'token': 'jwt-2'}
        resp = client.post('/register', data=self.FORM)

        assert resp.status_code == 302
        body = fake_api.called('POST', '/auth/register')[0]['json']
        assert body['role'] == 'customer'
        assert body['vehicleNumber'] == 'KA01AB1234'
        assert body['referralCode'] == 'FUEL-AB12'
        with client.session_transaction() as sess:
            assert sess['token'] == 'jwt-2'

    def test_password_mismatch(self, client, fake_api):
        resp = client.post('/register', data=dict(self.FORM, confirm_password='other1'))
        assert b'Passwords do not match!' in resp.data
        assert fake_api.called('POST', '/auth/register') == []

    def test_short_phone_and_password(self, client, fake_api):
        resp = client.post('/register', data=dict(self.FORM, phone='12345', password='abc',
                                                  confirm_password='abc'))
        assert b'Phone number must have at least 10 digits' in resp.data
        assert b'Password must be at least 6 characters' in resp.data

    def test_referral_code_from_link(self, client):
        resp = client.get('/register?ref=FUEL-XY12')
        assert b'FUEL-XY12' in resp.data


class TestSession:
    def test_logout_clears_session(self, customer_client):
        resp = customer_client.get('/logout')
        assert resp.status_code == 302
        with customer_client.session_transaction() as sess:
            assert 'token' not in sess
            assert 'user' not in sess

    def test_protected_page_requires_login(self, client):
        resp = client.get('/app/orders')
        assert resp.status_code == 302
        assert resp.headers['Location'].endswith('/')

    def test_customer_cannot_open_admin_pages(self, customer_client):
        resp = customer_client.get('/app/admin/customers')
        assert resp.status_code == 302
        assert resp.headers['Location'].endswith('/app/dashboard')

    def test_expired_token_logs_out(self, customer_client, fake_api):
        fake_api.responses[('GET', '/orders/my-orders')] = SessionExpired()
        resp = customer_client.get('/app/orders')
        assert resp.status_code == 302
        assert resp.headers['Location'].endswith('/login')
        with customer_client.session_transaction() as sess:
            assert 'token' not in sess

    def test_health(self, client):
        resp = client.get('/health')
        assert resp.get_json()['status'] == 'ok'
