"""
FuelMate Portal — Flask application entry point.

Customer and admin web portal for a prepaid fuel loyalty program. Customers
prepay for fuel at today's price, collect it later by showing a QR code, and
earn points they can redeem for cashback. Attendants verify those QR codes
and admins manage customers, prices, orders and support.

All data lives behind the FuelMate REST API (API_URL); this app renders pages
and forwards calls with the user's bearer token.

Usage:
    python app.py
"""

import logging
import os
from datetime import datetime

from flask import Flask, jsonify, redirect, render_template, request, url_for, flash
from flask_cors import CORS

from config import config

logger = logging.getLogger(__name__)

CUSTOMER_NAV = [
    ('MENU', [
        ('dashboard.dashboard', 'Dashboard'),
        ('orders.list_orders', 'My Orders'),
        ('account.transactions', 'Transactions'),
        ('account.rewards', 'Rewards'),
        ('account.referral', 'Refer & Earn'),
        ('support.index', 'Support'),
    ]),
]

ADMIN_NAV = [
    ('DASHBOARD', [
        ('dashboard.dashboard', 'Dashboard'),
    ]),
    ('MANAGEMENT', [
        ('admin.orders', 'Orders'),
        ('scan.index', 'Scan QR'),
        ('admin.customers', 'Customers'),
        ('admin.fuel_prices', 'Fuel Prices'),
        ('admin.support', 'Support Tickets'),
        ('admin.notifications', 'Notifications'),
    ]),
    ('TRANSACTIONS', [
        ('account.transactions', 'Transactions'),
        ('admin.create_transaction', 'Record Transaction'),
        ('account.rewards', 'Redemptions'),
    ]),
]


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def format_currency(value) -> str:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    return f"{config.CURRENCY_SYMBOL}{amount:,.2f}"


def format_date(value, fmt: str = '%d %b %Y') -> str:
    from utils.stats import parse_timestamp
    dt = parse_timestamp(value)
    return dt.strftime(fmt) if dt else ''


def format_label(value) -> str:
    return str(value or '').replace('-', ' ').replace('_', ' ').title()


def register_template_helpers(app: Flask) -> None:
    from utils.session_auth import current_user, is_admin

    app.add_template_filter(format_currency, 'currency')
    app.add_template_filter(format_date, 'date')
    app.add_template_filter(lambda v: format_date(v, '%d %b %Y %H:%M'), 'datetime')
    app.add_template_filter(format_label, 'label')

    @app.context_processor
    def inject_user():
        from flask import session
        user = current_user()
        return {
            'current_user': user,
            'is_admin': is_admin(),
            'nav_sections': (ADMIN_NAV if is_admin() else CUSTOMER_NAV) if user is not None else [],
            'theme': session.get('theme', 'light'),
            'currency_symbol': config.CURRENCY_SYMBOL,
            'year': datetime.now().year,
        }


def register_error_handlers(app: Flask) -> None:
    from utils.api_client import ApiError, SessionExpired
    from utils.session_auth import logout_user

    @app.errorhandler(SessionExpired)
    def session_expired(error):
        logout_user()
        flash(error.message, 'error')
        return redirect(url_for('auth.login'))

    @app.errorhandler(ApiError)
    def api_error(error):
        logger.warning("Unhandled backend error on %s: %s", request.path, error.message)
        flash(error.message, 'error')
        return redirect(url_for('dashboard.dashboard'))

    @app.errorhandler(404)
    def not_found(error):
        return redirect(url_for('index'))

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("Internal error on %s: %s", request.path, error)
        return jsonify({"error": "Internal server error"}), 500


def create_app() -> Flask:
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config['ENV'] = config.ENV
    app.config['DEBUG'] = config.DEBUG
    app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024

    CORS(app, resources={
        r"/api/*": {"origins": config.CORS_ORIGINS}
    })

    from routes.auth_routes import auth_bp
    from routes.dashboard_routes import dashboard_bp
    from routes.order_routes import order_bp
    from routes.account_routes import account_bp
    from routes.support_routes import support_bp
    from routes.admin_routes import admin_bp
    from routes.scan_routes import scan_bp
    from routes.api_routes import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(support_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(scan_bp)
    app.register_blueprint(api_bp)

    register_template_helpers(app)
    register_error_handlers(app)

    @app.route('/')
    def index():
        return render_template('landing.html')

    @app.route('/dashboard')
    def legacy_dashboard():
        return redirect(url_for('dashboard.dashboard'))

    @app.route('/health')
    def health():
        return jsonify({
            "status": "ok",
            "api_url": config.API_URL
        })

    return app


setup_logging()
app = create_app()

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    logger.info("FuelMate Portal on port %s, backend %s", port, config.API_URL)
    app.run(host='0.0.0.0', port=port, debug=config.DEBUG)
