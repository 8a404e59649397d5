"""
JSON endpoints — FuelMate Portal.

Used by the in-browser camera scanner and the order form's live total.
Authentication is the same session cookie as the HTML pages.

Endpoints:
    POST /api/scan/verify                 - Verify scanned QR text (admin)
    POST /api/orders/<order_id>/complete  - Complete a verified order (admin)
    GET  /api/quote                       - Order total for ?fuelType=&liters=
    GET  /api/notifications/unread-count  - Unread badge count
"""

import logging
from functools import wraps

from flask import Blueprint, request, jsonify, session

from utils.api_client import ApiError, SessionExpired, as_list
from utils.session_auth import is_logged_in, is_admin, logout_user

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def handle_errors(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SessionExpired as e:
            logout_user()
            return jsonify({"error": "unauthorized", "message": e.message}), 401
        except ApiError as e:
            return jsonify({"error": "backend_error", "message": e.message}), e.status_code or 502
        except Exception:
            logger.error("API error in %s", f.__name__, exc_info=True)
            return jsonify({"error": "Internal server error"}), 500
    return decorated


def json_login_required(admin: bool = False):
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if not is_logged_in():
                return jsonify({"error": "unauthorized", "message": "Please log in"}), 401
            if admin and not is_admin():
                return jsonify({"error": "forbidden", "message": "Admin access required"}), 403
            return f(*args, **kwargs)
        return decorated
    return decorator


@api_bp.route('/scan/verify', methods=['POST'])
@json_login_required(admin=True)
@handle_errors
def scan_verify():
    from routes.scan_routes import verify_qr

    data = request.get_json(silent=True) or {}
    qr_data = str(data.get('qrData') or '').strip()
    if not qr_data:
        return jsonify({"error": "bad_request", "message": "qrData is required"}), 400

    result, category, message = verify_qr(qr_data)
    session['scan_result'] = result
    return jsonify({"result": result, "ok": category == 'success', "message": message})


@api_bp.route('/orders/<order_id>/complete', methods=['POST'])
@json_login_required(admin=True)
@handle_errors
def complete_order(order_id: str):
    from utils.fuel_api import get_api
    from routes.scan_routes import NOT_VALID_MESSAGE, verified_order_id

    result = session.get('scan_result') or {}
    if verified_order_id(result) != order_id or not result.get('valid'):
        return jsonify({"error": "conflict", "message": NOT_VALID_MESSAGE}), 409

    get_api().orders.complete(order_id)
    session.pop('scan_result', None)
    return jsonify({"success": True, "message": "Order completed successfully!"})


@api_bp.route('/quote', methods=['GET'])
@json_login_required()
@handle_errors
def quote():
    from utils.fuel_api import get_api
    from utils.loyalty import price_per_liter, quote_order

    fuel_type = request.args.get('fuelType', '')
    liters = request.args.get('liters', '0')
    prices = as_list(get_api().fuel_prices.list())

    return jsonify({
        "fuelType": fuel_type,
        "pricePerLiter": price_per_liter(prices, fuel_type),
        "total": quote_order(prices, fuel_type, liters),
    })


@api_bp.route('/notifications/unread-count', methods=['GET'])
@json_login_required()
@handle_errors
def unread_count():
    from utils.fuel_api import get_api

    payload = get_api().notifications.unread_count()
    count = payload.get('count', 0) if isinstance(payload, dict) else (payload or 0)
    return jsonify({"count": count})
