"""
Admin panel routes — FuelMate Portal.

Provides the station admin with:
- Customer management (search, activity, delete)
- Order board (pending / completed / cancelled) with complete and cancel
- Fuel price editing
- Manual fuel transactions with points and redemption cashback
- Support ticket desk
- Notifications to one customer or to everyone

Routes:
    GET  /app/admin/customers                    - Customer list (?q=)
    POST /app/admin/customers/<id>/delete        - Delete a customer
    GET  /app/admin/orders                       - Orders (?filter=pending|completed|cancelled|all)
    POST /app/admin/orders/<id>/complete         - Complete an order
    POST /app/admin/orders/<id>/cancel           - Cancel an order
    GET  /app/admin/fuel-prices                  - Fuel prices
    POST /app/admin/fuel-prices/<id>             - Update price per liter
    GET  /app/admin/transactions/new             - Record a transaction (?customer=)
    POST /app/admin/transactions/new             - Submit the transaction
    GET  /app/admin/support                      - Tickets (?status=&q=)
    GET  /app/admin/support/<id>                 - Ticket detail
    POST /app/admin/support/<id>/reply           - Reply to a ticket
    POST /app/admin/support/<id>/status          - Change ticket status
    GET  /app/admin/notifications                - Sent notifications + send forms
    POST /app/admin/notifications/send           - Notify one customer
    POST /app/admin/notifications/broadcast      - Notify everyone
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash

from config import config
from routes.auth_routes import require_admin
from utils.api_client import ApiError, as_list, unwrap
from utils.loyalty import parse_liters, parse_price, transaction_quote
from utils.stats import (
    TICKET_STATUSES, average_fuel_price, completed_revenue, customer_activity,
    order_status_counts, search_customers, search_tickets, ticket_status_counts,
)

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/app/admin')

ORDER_FILTERS = ['pending', 'completed', 'cancelled', 'all']
FUEL_TYPES = ['petrol', 'diesel', 'cng']
COUNTER_PAYMENT_METHODS = ['cash', 'card', 'upi']
NOTIFICATION_TYPES = ['system', 'order', 'payment', 'reward']


def _safe_next(default_endpoint: str) -> str:
    target = request.form.get('next', '')
    if target.startswith('/') and not target.startswith('//'):
        return target
    return url_for(default_endpoint)


# --- Customers ---

@admin_bp.route('/customers')
@require_admin
def customers():
    from utils.fuel_api import get_api
    term = request.args.get('q', '').strip()

    items = []
    try:
        items = as_list(get_api().users.customers(), 'customers', 'data')
    except ApiError:
        flash('Failed to fetch customers', 'error')

    return render_template(
        'admin/customers.html',
        customers=search_customers(items, term),
        total=len(items),
        activity=customer_activity(items),
        search=term,
    )


@admin_bp.route('/customers/<customer_id>/delete', methods=['POST'])
@require_admin
def delete_customer(customer_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().users.delete(customer_id)
        flash('Customer deleted successfully', 'success')
        logger.info("Customer %s deleted", customer_id)
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(url_for('admin.customers'))


# --- Orders ---

@admin_bp.route('/orders')
@require_admin
def orders():
    from utils.fuel_api import get_api
    api = get_api()
    current = request.args.get('filter', 'pending')
    if current not in ORDER_FILTERS:
        current = 'pending'

    items = []
    try:
        if current == 'pending':
            payload = api.orders.pending()
        elif current == 'all':
            payload = api.orders.all_orders()
        else:
            payload = api.orders.all_orders({'status': current})
        items = as_list(payload, 'orders', 'data')
    except ApiError:
        flash('Failed to fetch orders', 'error')

    if current != 'all':
        items = [o for o in items if o.get('status') == current]

    return render_template(
        'admin/orders.html',
        orders=items,
        filter=current,
        filters=ORDER_FILTERS,
        counts=order_status_counts(items),
        revenue=completed_revenue(items),
    )


@admin_bp.route('/orders/<order_id>/complete', methods=['POST'])
@require_admin
def complete_order(order_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().orders.complete(order_id)
        flash('Order completed successfully', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(_safe_next('admin.orders'))


@admin_bp.route('/orders/<order_id>/cancel', methods=['POST'])
@require_admin
def cancel_order(order_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().orders.cancel(order_id)
        flash('Order cancelled successfully', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(_safe_next('admin.orders'))


# --- Fuel prices ---

@admin_bp.route('/fuel-prices')
@require_admin
def fuel_prices():
    from utils.fuel_api import get_api
    prices = []
    try:
        prices = as_list(get_api().fuel_prices.list())
    except ApiError:
        flash('Failed to fetch fuel prices', 'error')

    return render_template('admin/fuel_prices.html', prices=prices,
                           average=average_fuel_price(prices))


@admin_bp.route('/fuel-prices/<price_id>', methods=['POST'])
@require_admin
def update_fuel_price(price_id: str):
    from utils.fuel_api import get_api
    try:
        price = parse_price(request.form.get('price_per_liter'))
    except ValueError:
        flash('Please enter a valid price', 'error')
        return redirect(_safe_next('admin.fuel_prices'))

    try:
        get_api().fuel_prices.update(price_id, price)
        flash('Price updated successfully', 'success')
        logger.info("Fuel price %s set to %.2f", price_id, price)
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(_safe_next('admin.fuel_prices'))


# --- Manual transactions ---

@admin_bp.route('/transactions/new', methods=['GET', 'POST'])
@require_admin
def create_transaction():
    from utils.fuel_api import get_api
    api = get_api()

    customers_list, prices = [], []
    try:
        customers_list = as_list(api.transactions.customers(), 'customers', 'data')
        prices = as_list(api.fuel_prices.list())
    except ApiError:
        flash('Failed to load data', 'error')

    source = request.form if request.method == 'POST' else request.args
    customer_id = source.get('customer', '')
    customer = next((c for c in customers_list if c.get('_id') == customer_id), None)

    redemptions = []
    if customer_id:
        try:
            redemptions = as_list(api.rewards.customer_approved(customer_id), 'redemptions', 'data')
        except ApiError as e:
            logger.warning("Approved redemptions for %s unavailable: %s", customer_id, e.message)

    form = {
        'customer': customer_id,
        'fuel_type': source.get('fuel_type', 'petrol'),
        'liters': source.get('liters', ''),
        'payment_method': source.get('payment_method', 'cash'),
        'pump_operator': source.get('pump_operator', '')
        or (f"Recorded by Admin for {customer.get('name')}" if customer else ''),
        'notes': source.get('notes', ''),
        'double_points': source.get('double_points') == 'on',
        'redemption': source.get('redemption', ''),
    }
    redemption = next((r for r in redemptions if r.get('_id') == form['redemption']), None)
    quote = transaction_quote(prices, form['fuel_type'], form['liters'], form['double_points'],
                              redemption.get('cashbackAmount', 0) if redemption else 0)

    def render():
        return render_template(
            'admin/create_transaction.html',
            form=form,
            customers=customers_list,
            customer=customer,
            redemptions=redemptions,
            prices=prices,
            fuel_types=FUEL_TYPES,
            payment_methods=COUNTER_PAYMENT_METHODS,
            quote=quote,
        )

    if request.method == 'POST':
        if not customer_id:
            flash('Please select a customer', 'error')
            return render()
        try:
            liters = parse_liters(form['liters'])
        except ValueError:
            flash('Please enter valid liters', 'error')
            return render()

        data = {
            'customerId': customer_id,
            'fuelType': form['fuel_type'],
            'liters': liters,
            'paymentMethod': form['payment_method'],
            'pumpOperator': form['pump_operator'],
            'notes': form['notes'],
            'isDoublePoints': form['double_points'],
        }
        if redemption:
            data['redemptionId'] = redemption['_id']

        try:
            response = api.transactions.create(data) or {}
        except ApiError as e:
            flash(e.message, 'error')
            return render()

        if redemption:
            cashback = response.get('cashbackApplied', 0)
            flash(f"Transaction recorded with {config.CURRENCY_SYMBOL}{cashback} cashback!", 'success')
        else:
            flash('Transaction recorded successfully!', 'success')
        return redirect(url_for('account.transactions'))

    return render()


# --- Support desk ---

@admin_bp.route('/support')
@require_admin
def support():
    from utils.fuel_api import get_api
    status = request.args.get('status', '')
    query = request.args.get('q', '').strip()

    tickets = []
    try:
        tickets = as_list(get_api().support.all(status or None), 'tickets', 'data')
    except ApiError:
        flash('Failed to load tickets', 'error')

    return render_template(
        'admin/support.html',
        tickets=search_tickets(tickets, query),
        counts=ticket_status_counts(tickets),
        statuses=TICKET_STATUSES,
        status=status,
        search=query,
    )


@admin_bp.route('/support/<ticket_id>')
@require_admin
def support_ticket(ticket_id: str):
    from utils.fuel_api import get_api
    try:
        ticket = unwrap(get_api().support.get(ticket_id), 'ticket', 'data')
    except ApiError:
        flash('Failed to load ticket details', 'error')
        return redirect(url_for('admin.support'))

    return render_template('admin/ticket.html', ticket=ticket or {}, ticket_id=ticket_id,
                           statuses=TICKET_STATUSES)


@admin_bp.route('/support/<ticket_id>/reply', methods=['POST'])
@require_admin
def reply_ticket(ticket_id: str):
    from utils.fuel_api import get_api
    message = request.form.get('message', '').strip()
    if message:
        try:
            get_api().support.reply(ticket_id, message)
            flash('Reply sent successfully', 'success')
        except ApiError:
            flash('Failed to send reply', 'error')
    return redirect(url_for('admin.support_ticket', ticket_id=ticket_id))


@admin_bp.route('/support/<ticket_id>/status', methods=['POST'])
@require_admin
def update_ticket_status(ticket_id: str):
    from utils.fuel_api import get_api
    status = request.form.get('status', '')
    if status not in TICKET_STATUSES:
        flash('Invalid status', 'error')
    else:
        try:
            get_api().support.update_status(ticket_id, status)
            flash(f'Ticket marked as {status}', 'success')
        except ApiError:
            flash('Failed to update status', 'error')
    return redirect(_safe_next('admin.support'))


# --- Notifications ---

@admin_bp.route('/notifications')
@require_admin
def notifications():
    from utils.fuel_api import get_api
    api = get_api()

    sent, customers_list = [], []
    try:
        sent = as_list(api.notifications.all(), 'notifications', 'data')
        customers_list = as_list(api.users.customers(), 'customers', 'data')
    except ApiError as e:
        flash(e.message, 'error')

    return render_template('admin/notifications.html', notifications=sent,
                           customers=customers_list, types=NOTIFICATION_TYPES)


def _notification_form():
    title = request.form.get('title', '').strip()
    message = request.form.get('message', '').strip()
    kind = request.form.get('type', 'system')
    if kind not in NOTIFICATION_TYPES:
        kind = 'system'
    return title, message, kind


@admin_bp.route('/notifications/send', methods=['POST'])
@require_admin
def send_notification():
    from utils.fuel_api import get_api
    user_id = request.form.get('user_id', '')
    title, message, kind = _notification_form()

    if not user_id or not title or not message:
        flash('Please fill in all fields', 'error')
        return redirect(url_for('admin.notifications'))

    try:
        get_api().notifications.send({'userId': user_id, 'title': title,
                                      'message': message, 'type': kind})
        flash('Notification sent', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(url_for('admin.notifications'))


@admin_bp.route('/notifications/broadcast', methods=['POST'])
@require_admin
def broadcast_notification():
    from utils.fuel_api import get_api
    title, message, kind = _notification_form()

    if not title or not message:
        flash('Please fill in all fields', 'error')
        return redirect(url_for('admin.notifications'))

    try:
        get_api().notifications.broadcast({'title': title, 'message': message, 'type': kind})
        flash('Notification sent to all customers', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(url_for('admin.notifications'))
