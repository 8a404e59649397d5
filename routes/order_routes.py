"""
Customer order routes — FuelMate Portal.

Routes:
    GET  /app/orders                 - My orders, filtered by status and date
    GET  /app/order/new              - Prepaid order form
    POST /app/order/new              - Create the order and open it
    GET  /app/order/<order_id>       - Order details (QR shown once paid)
    POST /app/order/<order_id>/pay   - Simulate payment
    GET  /app/order/<order_id>/qr.png - QR code PNG for pickup
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash, Response, abort

from routes.auth_routes import require_login
from utils.api_client import ApiError, as_list, unwrap
from utils.loyalty import PAYMENT_METHODS, parse_liters, price_per_liter, quote_order
from utils.stats import filter_orders

logger = logging.getLogger(__name__)

order_bp = Blueprint('orders', __name__, url_prefix='/app')

STATUS_FILTERS = ['all', 'pending', 'completed', 'cancelled']
DATE_FILTERS = ['all', 'today', 'week', 'month', 'year']


def order_id_of(payload) -> str:
    """Id of a newly created order; the backend has used several shapes."""
    if not isinstance(payload, dict):
        return ''
    order = payload.get('order') or {}
    return order.get('orderId') or order.get('_id') or payload.get('_id') or ''


@order_bp.route('/orders')
@require_login
def list_orders():
    from utils.fuel_api import get_api
    status = request.args.get('status', 'all')
    date_range = request.args.get('date', 'all')

    orders = []
    try:
        orders = as_list(get_api().orders.my_orders(), 'orders', 'data')
    except ApiError as e:
        flash(e.message, 'error')

    return render_template(
        'orders/list.html',
        orders=filter_orders(orders, status, date_range),
        total=len(orders),
        status=status,
        date_range=date_range,
        status_filters=STATUS_FILTERS,
        date_filters=DATE_FILTERS,
    )


@order_bp.route('/order/new', methods=['GET', 'POST'])
@require_login
def create_order():
    from utils.fuel_api import get_api
    api = get_api()

    fuel_prices = []
    try:
        fuel_prices = as_list(api.fuel_prices.list())
    except ApiError:
        flash('Failed to fetch fuel prices', 'error')

    default_type = fuel_prices[0].get('fuelType', '') if fuel_prices else ''
    form = {
        'fuel_type': request.form.get('fuel_type', default_type),
        'quantity': request.form.get('quantity', ''),
        'payment_method': request.form.get('payment_method', 'upi'),
    }

    def render():
        return render_template(
            'orders/new.html',
            form=form,
            fuel_prices=fuel_prices,
            payment_methods=PAYMENT_METHODS,
            price_per_liter=price_per_liter(fuel_prices, form['fuel_type']),
            total=quote_order(fuel_prices, form['fuel_type'], form['quantity'] or 0),
        )

    if request.method == 'POST':
        if not form['fuel_type'] or not form['quantity']:
            flash('Please fill in all fields', 'error')
            return render()

        try:
            liters = parse_liters(form['quantity'])
        except ValueError as e:
            flash(str(e), 'error')
            return render()

        total = liters * price_per_liter(fuel_prices, form['fuel_type'])
        try:
            payload = api.orders.create({
                'fuelType': form['fuel_type'],
                'liters': liters,
                'totalAmount': total,
                'finalAmount': total,
                'paymentMethod': form['payment_method'],
            })
        except ApiError as e:
            if 'paymentMethod' in e.message:
                flash('Invalid payment method selected', 'error')
            else:
                flash(e.message, 'error')
            return render()

        flash('Order created successfully!', 'success')
        order_id = order_id_of(payload)
        if not order_id:
            logger.warning("Order created but response carried no id: %r", payload)
            return redirect(url_for('orders.list_orders'))
        return redirect(url_for('orders.order_detail', order_id=order_id))

    return render()


def _fetch_order(order_id: str):
    from utils.fuel_api import get_api
    return unwrap(get_api().orders.get(order_id), 'order', 'data')


@order_bp.route('/order/<order_id>')
@require_login
def order_detail(order_id: str):
    try:
        order = _fetch_order(order_id)
    except ApiError as e:
        flash(e.message, 'error')
        return redirect(url_for('orders.list_orders'))

    if not isinstance(order, dict):
        flash('Failed to fetch order details', 'error')
        return redirect(url_for('orders.list_orders'))

    show_qr = bool(order.get('qrCodeData')) and order.get('status') == 'pending' \
        and order.get('paymentStatus') == 'paid'

    return render_template('orders/detail.html', order=order, order_id=order_id, show_qr=show_qr)


@order_bp.route('/order/<order_id>/pay', methods=['POST'])
@require_login
def simulate_payment(order_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().orders.simulate_payment(order_id)
        flash('Payment simulated successfully!', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(url_for('orders.order_detail', order_id=order_id))


@order_bp.route('/order/<order_id>/qr.png')
@require_login
def order_qr(order_id: str):
    from utils.qr import order_qr_png
    try:
        order = _fetch_order(order_id)
    except ApiError:
        abort(404)

    if not isinstance(order, dict) or not order.get('qrCodeData'):
        abort(404)

    return Response(order_qr_png(order['qrCodeData']), mimetype='image/png')
