"""
QR codes for prepaid orders.

Customers are shown their order's `qrCodeData` as a PNG; attendants can
upload a photo of that code instead of using the live camera scanner.
"""

import io
from typing import Optional

import cv2
import numpy as np
import qrcode
from PIL import Image, UnidentifiedImageError


def order_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(box_size=8, border=2, error_correction=qrcode.constants.ERROR_CORRECT_M)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color='black', back_color='white')

    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


def decode_qr_image(raw: bytes) -> Optional[str]:
    """Text of the first QR code found in an image, or None."""
    if not raw:
        return None
    try:
        pil_img = Image.open(io.BytesIO(raw)).convert('RGB')
    except (UnidentifiedImageError, OSError):
        return None

    img = cv2.cvtColor(np.array(pil_img), cv2.COLOR_RGB2BGR)
    detector = cv2.QRCodeDetector()

    text, points, _ = detector.detectAndDecode(img)
    if not text:
        # second pass: upscaled grayscale
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
        gray = cv2.resize(gray, None, fx=2, fy=2, interpolation=cv2.INTER_CUBIC)
        text, points, _ = detector.detectAndDecode(gray)

    return text.strip() if text else None
