"""
QR scan routes — pickup verification for FuelMate attendants.

The attendant scans the customer's order QR code (camera, photo upload or
typed order id). The scanned text is sent to the backend for verification;
the backend decides whether the order is paid, pending and ready to hand
over. The last result is kept in the session until the order is completed
or the scanner is reset.

Routes:
    GET  /app/admin/scan-qr            - Scanner page
    POST /app/admin/scan-qr/verify     - Verify typed or camera-decoded text
    POST /app/admin/scan-qr/upload     - Verify the QR code in an uploaded photo
    POST /app/admin/scan-qr/complete   - Complete the verified order
    POST /app/admin/scan-qr/reset      - Clear the last result
"""

import logging
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, render_template, request, redirect, url_for, flash, session

from routes.auth_routes import require_admin
from utils.api_client import ApiError

logger = logging.getLogger(__name__)

scan_bp = Blueprint('scan', __name__, url_prefix='/app/admin/scan-qr')

NOT_VALID_MESSAGE = 'Order found but not valid for completion'


def verify_qr(qr_data: str) -> Tuple[Dict[str, Any], Optional[str], Optional[str]]:
    """
    Verify scanned text with the backend.

    Returns (result, category, message):
    - valid order            -> ('success', 'Order verified successfully')
    - found but not usable   -> ('error', server message)
    - lookup failed          -> ('error', server message), result flagged `error`
    - anything else          -> (None, None), nothing to flash
    """
    from utils.fuel_api import get_api

    try:
        result = get_api().orders.verify(qr_data) or {}
    except ApiError as e:
        return {'error': True, 'message': e.message}, 'error', e.message

    if result.get('valid'):
        return result, 'success', 'Order verified successfully'
    if result.get('success'):
        return result, 'error', result.get('message') or NOT_VALID_MESSAGE
    return result, None, None


def verified_order_id(result: Dict[str, Any]) -> str:
    order = (result or {}).get('order') or {}
    return order.get('orderId') or order.get('_id') or ''


@scan_bp.route('/')
@require_admin
def index():
    return render_template('scan/index.html', result=session.get('scan_result'))


@scan_bp.route('/verify', methods=['POST'])
@require_admin
def verify():
    qr_data = request.form.get('qr_data', '').strip()
    if not qr_data:
        flash('Enter an order ID or scan a QR code', 'error')
        return redirect(url_for('scan.index'))

    result, category, message = verify_qr(qr_data)
    session['scan_result'] = result
    if message:
        flash(message, category)
    logger.info("QR verification for %r: %s", qr_data, 'valid' if result.get('valid') else 'rejected')
    return redirect(url_for('scan.index'))


@scan_bp.route('/upload', methods=['POST'])
@require_admin
def upload():
    from utils.qr import decode_qr_image

    image = request.files.get('image')
    if image is None or not image.filename:
        flash('Choose an image to scan', 'error')
        return redirect(url_for('scan.index'))

    qr_data = decode_qr_image(image.read())
    if not qr_data:
        flash('No QR code found in image', 'error')
        return redirect(url_for('scan.index'))

    result, category, message = verify_qr(qr_data)
    session['scan_result'] = result
    if message:
        flash(message, category)
    return redirect(url_for('scan.index'))


@scan_bp.route('/complete', methods=['POST'])
@require_admin
def complete():
    from utils.fuel_api import get_api

    result = session.get('scan_result') or {}
    order_id = verified_order_id(result)
    if not order_id:
        flash('Scan an order first', 'error')
        return redirect(url_for('scan.index'))
    if not result.get('valid'):
        flash(NOT_VALID_MESSAGE, 'error')
        return redirect(url_for('scan.index'))

    try:
        get_api().orders.complete(order_id)
    except ApiError as e:
        flash(e.message, 'error')
        return redirect(url_for('scan.index'))

    session.pop('scan_result', None)
    flash('Order completed successfully!', 'success')
    logger.info("Order %s completed at pickup", order_id)
    return redirect(url_for('scan.index'))


@scan_bp.route('/reset', methods=['POST'])
@require_admin
def reset():
    session.pop('scan_result', None)
    return redirect(url_for('scan.index'))
