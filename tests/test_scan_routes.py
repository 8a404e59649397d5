"""Tests for pickup verification: manual entry, photo upload, completion."""
import io

from conftest import backend_error, flashes

VALID = {'valid': True, 'order': {'orderId': 'ord-7', 'customerName': 'Asha Rao',
                                  'fuelType': 'petrol', 'liters': 5, 'status': 'pending',
                                  'paymentStatus': 'paid', 'totalAmount': 500}}


class TestVerify:
    def test_valid_order_stored(self, admin_client, fake_api):
        fake_api.responses[('POST', '/orders/verify')] = dict(VALID)

        resp = admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': ' FUELMATE:ord-7 '})

        assert resp.headers['Location'].endswith('/app/admin/scan-qr/')
        assert fake_api.called('POST', '/orders/verify')[0]['json'] == {'qrData': 'FUELMATE:ord-7'}
        with admin_client.session_transaction() as sess:
            assert sess['scan_result']['order']['orderId'] == 'ord-7'
        assert 'Order verified successfully' in flashes(admin_client)

    def test_not_valid_uses_server_message(self, admin_client, fake_api):
        fake_api.responses[('POST', '/orders/verify')] = {
            'valid': False, 'success': True, 'message': 'Order already completed',
            'order': {'orderId': 'ord-7'}}
        admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': 'ord-7'})
        assert 'Order already completed' in flashes(admin_client)

    def test_not_valid_without_message(self, admin_client, fake_api):
        fake_api.responses[('POST', '/orders/verify')] = {'valid': False, 'success': True}
        admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': 'ord-7'})
        assert 'Order found but not valid for completion' in flashes(admin_client)

    def test_neither_valid_nor_success_is_silent(self, admin_client, fake_api):
        fake_api.responses[('POST', '/orders/verify')] = {'order': {'orderId': 'ord-7'}}
        admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': 'ord-7'})
        assert flashes(admin_client) == []
        with admin_client.session_transaction() as sess:
            assert sess['scan_result'] == {'order': {'orderId': 'ord-7'}}

    def test_lookup_failure(self, admin_client, fake_api):
        fake_api.responses[('POST', '/orders/verify')] = backend_error('Order not found', 404)
        admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': 'bogus'})
        with admin_client.session_transaction() as sess:
            assert sess['scan_result'] == {'error': True, 'message': 'Order not found'}

    def test_empty_input(self, admin_client, fake_api):
        admin_client.post('/app/admin/scan-qr/verify', data={'qr_data': '   '})
        assert fake_api.calls == []
        assert 'Enter an order ID or scan a QR code' in flashes(admin_client)

    def test_page_shows_result(self, admin_client):
        with admin_client.session_transaction() as sess:
            sess['scan_result'] = dict(VALID)
        resp = admin_client.get('/app/admin/scan-qr/')
        assert b'ord-7' in resp.data
        assert b'Complete order' in resp.data

    def test_customer_redirected(self, customer_client):
        resp = customer_client.get('/app/admin/scan-qr/')
        assert resp.headers['Location'].endswith('/app/dashboard')


class TestUpload:
    def test_decoded_image_is_verified(self, admin_client, fake_api, monkeypatch):
        monkeypatch.setattr('utils.qr.decode_qr_image', lambda raw: 'FUELMATE:ord-7')
        fake_api.responses[('POST', '/orders/verify')] = dict(VALID)

        admin_client.post('/app/admin/scan-qr/upload',
                          data={'image': (io.BytesIO(b'fake-image'), 'qr.png')},
                          content_type='multipart/form-data')

        assert fake_api.called('POST', '/orders/verify')[0]['json'] == {'qrData': 'FUELMATE:ord-7'}

    def test_no_qr_found(self, admin_client, fake_api, monkeypatch):
        monkeypatch.setattr('utils.qr.decode_qr_image', lambda raw: None)
        admin_client.post('/app/admin/scan-qr/upload',
                          data={'image': (io.BytesIO(b'blank'), 'blank.png')},
                          content_type='multipart/form-data')
        assert fake_api.calls == []
        assert 'No QR code found in image' in flashes(admin_client)

    def test_no_file(self, admin_client):
        admin_client.post('/app/admin/scan-qr/upload', data={}, content_type='multipart/form-data')
        assert 'Choose an image to scan' in flashes(admin_client)


class TestComplete:
    def test_completes_verified_order(self, admin_client, fake_api):
        with admin_client.session_transaction() as sess:
            sess['scan_result'] = dict(VALID)

        admin_client.post('/app/admin/scan-qr/complete')

        assert fake_api.called('PUT', '/orders/ord-7/complete')
        with admin_client.session_transaction() as sess:
            assert 'scan_result' not in sess
        assert 'Order completed successfully!' in flashes(admin_client)

    def test_invalid_result_not_completed(self, admin_client, fake_api):
        with admin_client.session_transaction() as sess:
            sess['scan_result'] = {'valid': False, 'success': True,
                                   'order': {'orderId': 'ord-9', 'paymentStatus': 'pending'}}

        admin_client.post('/app/admin/scan-qr/complete')

        assert fake_api.called('PUT', '/orders/ord-9/complete') == []
        assert 'Order found but not valid for completion' in flashes(admin_client)
        with admin_client.session_transaction() as sess:
            assert 'scan_result' in sess

    def test_nothing_scanned(self, admin_client, fake_api):
        admin_client.post('/app/admin/scan-qr/complete')
        assert fake_api.calls == []
        assert 'Scan an order first' in flashes(admin_client)

    def test_failure_keeps_result(self, admin_client, fake_api):
        with admin_client.session_transaction() as sess:
            sess['scan_result'] = dict(VALID)
        fake_api.responses[('PUT', '/orders/ord-7/complete')] = backend_error('Order already completed')
        admin_client.post('/app/admin/scan-qr/complete')
        with admin_client.session_transaction() as sess:
            assert 'scan_result' in sess

    def test_reset(self, admin_client):
        with admin_client.session_transaction() as sess:
            sess['scan_result'] = dict(VALID)
        admin_client.post('/app/admin/scan-qr/reset')
        with admin_client.session_transaction() as sess:
            assert 'scan_result' not in sess
