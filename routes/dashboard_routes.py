"""
Dashboard routes — FuelMate Portal.

Routes:
    GET /app/            - Redirect to the dashboard
    GET /app/dashboard   - Admin overview or customer loyalty summary, by role
"""

import logging

from flask import Blueprint, render_template, redirect, url_for, flash

from routes.auth_routes import require_login
from utils.api_client import ApiError, as_list
from utils.loyalty import referral_code
from utils.session_auth import current_user, is_admin
from utils.stats import admin_dashboard_stats, customer_dashboard_stats

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/app')


@dashboard_bp.route('/')
@require_login
def index():
    return redirect(url_for('dashboard.dashboard'))


@dashboard_bp.route('/dashboard')
@require_login
def dashboard():
    from utils.fuel_api import get_api
    api = get_api()
    user = current_user()

    if is_admin():
        stats = admin_dashboard_stats([], [], [], [])
        try:
            customers = as_list(api.users.customers())
            orders = api.orders.all_orders({'limit': 1000})
            fuel_prices = as_list(api.fuel_prices.list())
            tickets = as_list(api.support.all(), 'tickets', 'data')
            stats = admin_dashboard_stats(customers, orders, fuel_prices, tickets)
        except ApiError as e:
            logger.warning("Admin dashboard load failed: %s", e.message)
            flash('Failed to load dashboard data', 'error')
        return render_template('dashboard/admin.html', stats=stats)

    stats = customer_dashboard_stats(user, [], [])
    try:
        transactions = as_list(api.transactions.mine(), 'transactions', 'data')
        fuel_prices = as_list(api.fuel_prices.list())
        stats = customer_dashboard_stats(user, transactions, fuel_prices)
    except ApiError as e:
        logger.warning("Customer dashboard load failed: %s", e.message)
        flash('Failed to load dashboard data', 'error')

    return render_template(
        'dashboard/customer.html',
        stats=stats,
        referral_code=referral_code(user),
    )
