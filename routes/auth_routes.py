"""
Authentication routes — FuelMate Portal.

Routes:
    GET/POST /login      - Email + password login against the backend
    GET/POST /register   - Customer self-registration
    GET      /logout     - Clear the session and return to the landing page

Also provides the `require_login` / `require_admin` decorators used by every
other blueprint.
"""

import logging
from functools import wraps

from flask import Blueprint, render_template, request, redirect, url_for, flash

from utils.api_client import ApiError
from utils.session_auth import login_user, logout_user, is_logged_in, is_admin

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def require_login(f):
    """Decorator: send anonymous visitors to the landing page."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not is_logged_in():
            return redirect(url_for('index'))
        return f(*args, **kwargs)
    return decorated


def require_admin(f):
    """Decorator: admin-only pages; customers land on their dashboard."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not is_logged_in():
            return redirect(url_for('index'))
        if not is_admin():
            return redirect(url_for('dashboard.dashboard'))
        return f(*args, **kwargs)
    return decorated


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if is_logged_in():
        return redirect(url_for('dashboard.dashboard'))

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')

        if not email or not password:
            flash('Please enter your email and password', 'error')
            return render_template('auth/login.html', email=email)

        from utils.fuel_api import get_api
        try:
            payload = get_api().auth.login(email, password)
            login_user(payload)
        except ApiError as e:
            flash(e.message, 'error')
            return render_template('auth/login.html', email=email)
        except ValueError:
            logger.error("Login response for %s carried no token", email)
            flash('Login failed', 'error')
            return render_template('auth/login.html', email=email)

        flash('Login successful!', 'success')
        return redirect(url_for('dashboard.dashboard'))

    return render_template('auth/login.html', email='')


def _registration_errors(form: dict) -> list:
    errors = []
    if not form['name']:
        errors.append('Name is required')
    if not form['email']:
        errors.append('Email is required')
    if len(form['phone']) < 10:
        errors.append('Phone number must have at least 10 digits')
    if len(form['password']) < 6:
        errors.append('Password must be at least 6 characters')
    elif form['password'] != form['confirm_password']:
        errors.append('Passwords do not match!')
    return errors


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if is_logged_in():
        return redirect(url_for('dashboard.dashboard'))

    form = {
        'name': request.form.get('name', '').strip(),
        'email': request.form.get('email', '').strip(),
        'phone': request.form.get('phone', '').strip(),
        'vehicle_number': request.form.get('vehicle_number', '').strip(),
        'referral_code': request.form.get('referral_code', request.args.get('ref', '')).strip(),
        'password': request.form.get('password', ''),
        'confirm_password': request.form.get('confirm_password', ''),
    }

    if request.method == 'POST':
        errors = _registration_errors(form)
        if errors:
            for message in errors:
                flash(message, 'error')
            return render_template('auth/register.html', form=form)

        user_data = {
            'name': form['name'],
            'email': form['email'],
            'phone': form['phone'],
            'vehicleNumber': form['vehicle_number'],
            'password': form['password'],
            'role': 'customer',
            'referralCode': form['referral_code'],
        }

        from utils.fuel_api import get_api
        try:
            payload = get_api().auth.register(user_data)
            login_user(payload)
        except ApiError as e:
            flash(e.message, 'error')
            return render_template('auth/register.html', form=form)
        except ValueError:
            flash('Registration failed', 'error')
            return render_template('auth/register.html', form=form)

        flash('Registration successful!', 'success')
        return redirect(url_for('dashboard.dashboard'))

    return render_template('auth/register.html', form=form)


@auth_bp.route('/logout')
def logout():
    logout_user()
    flash('Logged out successfully', 'success')
    return redirect(url_for('index'))
