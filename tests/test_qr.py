"""Tests for utils/qr.py — order QR images and photo decoding."""
from utils.qr import order_qr_png, decode_qr_image


def test_png_header():
    assert order_qr_png('FUELMATE:ord-1').startswith(b'\x89PNG\r\n\x1a\n')


def test_decodes_generated_code():
    payload = '{"orderId":"65f0c1d2e3ab9f","customerId":"u-1","liters":5}'
    assert decode_qr_image(order_qr_png(payload)) == payload


def test_not_an_image():
    assert decode_qr_image(b'definitely not an image') is None


def test_empty_upload():
    assert decode_qr_image(b'') is None


def test_image_without_code():
    from io import BytesIO
    from PIL import Image

    buf = BytesIO()
    Image.new('RGB', (64, 64), 'white').save(buf, format='PNG')
    assert decode_qr_image(buf.getvalue()) is None
