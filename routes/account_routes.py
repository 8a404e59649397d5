"""
Account routes — FuelMate Portal.

Routes:
    GET  /app/transactions                       - Fuel transactions (all for admins)
    GET  /app/notifications                      - My notifications (?filter=all|unread|read)
    POST /app/notifications/<id>/read            - Mark one as read
    POST /app/notifications/read-all             - Mark all as read
    POST /app/notifications/<id>/delete          - Delete one
    GET  /app/profile                            - Profile
    POST /app/profile                            - Update profile
    GET  /app/referral                           - Referral code and earnings
    GET  /app/rewards                            - Redemptions (all for admins)
    POST /app/rewards/redeem                     - Request a points redemption
    POST /app/rewards/<id>/status                - Approve / reject (admin)
    GET  /app/settings                           - Theme and notification preferences
    POST /app/settings                           - Save preferences
    GET  /app/terms, /app/privacy                - Static pages
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash, session

from routes.auth_routes import require_login, require_admin
from utils.api_client import ApiError, as_list
from utils.loyalty import referral_code, validate_redemption
from utils.session_auth import current_user, is_admin, update_current_user
from utils.stats import (
    filter_notifications, referral_earnings, referral_transactions, search_transactions,
)

logger = logging.getLogger(__name__)

account_bp = Blueprint('account', __name__, url_prefix='/app')

NOTIFICATION_PREFERENCES = ('push', 'email', 'promotions')
DEFAULT_PREFERENCES = {'push': True, 'email': True, 'promotions': False}

REDEMPTION_TYPES = {
    'fuel-credit': 'Fuel Credit (cashback on next fueling)',
    'cashback': 'Direct Cashback',
}

NOTIFICATION_TYPES = {
    'order': 'Order',
    'payment': 'Payment',
    'reward': 'Reward',
    'system': 'System',
}


@account_bp.route('/transactions')
@require_login
def transactions():
    from utils.fuel_api import get_api
    api = get_api()
    search = request.args.get('q', '').strip()

    items = []
    try:
        payload = api.transactions.all() if is_admin() else api.transactions.mine()
        items = as_list(payload, 'transactions', 'data')
    except ApiError as e:
        flash(e.message, 'error')

    return render_template(
        'account/transactions.html',
        transactions=search_transactions(items, search),
        search=search,
    )


@account_bp.route('/notifications')
@require_login
def notifications():
    from utils.fuel_api import get_api
    which = request.args.get('filter', 'all')

    items = []
    try:
        items = as_list(get_api().notifications.mine(), 'notifications', 'data')
    except ApiError as e:
        flash(e.message, 'error')

    return render_template(
        'account/notifications.html',
        notifications=filter_notifications(items, which),
        unread=sum(1 for n in items if not n.get('read')),
        which=which,
        notification_types=NOTIFICATION_TYPES,
    )


@account_bp.route('/notifications/<notification_id>/read', methods=['POST'])
@require_login
def mark_notification_read(notification_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().notifications.mark_read(notification_id)
        flash('Marked as read', 'success')
    except ApiError:
        flash('Failed to update notification', 'error')
    return redirect(url_for('account.notifications', filter=request.form.get('filter', 'all')))


@account_bp.route('/notifications/read-all', methods=['POST'])
@require_login
def mark_all_notifications_read():
    from utils.fuel_api import get_api
    try:
        get_api().notifications.mark_all_read()
        flash('All notifications marked as read', 'success')
    except ApiError:
        flash('Failed to update notifications', 'error')
    return redirect(url_for('account.notifications'))


@account_bp.route('/notifications/<notification_id>/delete', methods=['POST'])
@require_login
def delete_notification(notification_id: str):
    from utils.fuel_api import get_api
    try:
        get_api().notifications.delete(notification_id)
        flash('Notification deleted', 'success')
    except ApiError:
        flash('Failed to delete notification', 'error')
    return redirect(url_for('account.notifications', filter=request.form.get('filter', 'all')))


@account_bp.route('/profile', methods=['GET', 'POST'])
@require_login
def profile():
    from utils.fuel_api import get_api
    api = get_api()

    if request.method == 'POST':
        update = {
            'name': request.form.get('name', '').strip(),
            'email': request.form.get('email', '').strip(),
            'phone': request.form.get('phone', '').strip(),
            'vehicleNumber': request.form.get('vehicle_number', '').strip(),
        }
        password = request.form.get('password', '')
        if password:
            if len(password) < 6:
                flash('Password must be at least 6 characters', 'error')
                return redirect(url_for('account.profile'))
            update['password'] = password

        try:
            response = api.auth.update_profile(update)
            update_current_user(response)
            flash('Profile updated successfully!', 'success')
        except ApiError as e:
            flash(e.message, 'error')
        return redirect(url_for('account.profile'))

    user = current_user()
    try:
        user = update_current_user(api.auth.get_profile())
    except ApiError:
        flash('Failed to load profile', 'error')

    return render_template('account/profile.html', user=user, referral_code=referral_code(user))


@account_bp.route('/referral')
@require_login
def referral():
    from utils.fuel_api import get_api
    api = get_api()

    user = current_user()
    items = []
    try:
        user = update_current_user(api.auth.get_profile())
        items = referral_transactions(as_list(api.transactions.mine(), 'transactions', 'data'))
    except ApiError:
        flash('Failed to load referral data', 'error')

    code = referral_code(user)
    return render_template(
        'account/referral.html',
        referral_code=code,
        share_url=url_for('auth.register', ref=code, _external=True),
        referrals=items,
        total_earnings=referral_earnings(items),
    )


@account_bp.route('/rewards')
@require_login
def rewards():
    from utils.fuel_api import get_api
    api = get_api()

    user = current_user()
    redemptions = []
    try:
        if is_admin():
            redemptions = as_list(api.rewards.all(), 'redemptions', 'data')
        else:
            redemptions = as_list(api.rewards.mine(), 'redemptions', 'data')
            user = update_current_user(api.auth.get_profile())
    except ApiError as e:
        flash(e.message, 'error')

    return render_template('account/rewards.html', redemptions=redemptions, user=user,
                           redemption_types=REDEMPTION_TYPES)


@account_bp.route('/rewards/redeem', methods=['POST'])
@require_login
def redeem():
    from utils.fuel_api import get_api
    user = current_user()

    try:
        points = validate_redemption(request.form.get('points'), user.get('availablePoints'))
    except ValueError as e:
        flash(str(e), 'error')
        return redirect(url_for('account.rewards'))

    try:
        redemption_type = request.form.get('redemption_type', 'fuel-credit')
        if redemption_type not in REDEMPTION_TYPES:
            redemption_type = 'fuel-credit'
        get_api().rewards.redeem({'pointsUsed': points, 'redemptionType': redemption_type})
        logger.info("Redemption of %d points requested by %s", points, user.get('_id'))
        flash('Redemption request submitted! It will be approved by admin.', 'success')
    except ApiError as e:
        flash(e.message, 'error')
    return redirect(url_for('account.rewards'))


@account_bp.route('/rewards/<redemption_id>/status', methods=['POST'])
@require_admin
def update_redemption(redemption_id: str):
    from utils.fuel_api import get_api
    status = request.form.get('status', '')
    if status not in ('approved', 'rejected'):
        flash('Invalid status', 'error')
        return redirect(url_for('account.rewards'))

    data = {'status': status}
    if status == 'rejected' and request.form.get('reason'):
        data['notes'] = request.form['reason'].strip()

    try:
        get_api().rewards.update_status(redemption_id, data)
        logger.info("Redemption %s %s", redemption_id, status)
        flash('Redemption approved!' if status == 'approved' else 'Redemption rejected', 'success')
    except ApiError:
        flash('Failed to approve' if status == 'approved' else 'Failed to reject', 'error')
    return redirect(url_for('account.rewards'))


def notification_preferences() -> dict:
    prefs = dict(DEFAULT_PREFERENCES)
    prefs.update(session.get('notification_preferences') or {})
    return prefs


@account_bp.route('/settings', methods=['GET', 'POST'])
@require_login
def settings():
    if request.method == 'POST':
        session['notification_preferences'] = {
            key: request.form.get(key) == 'on' for key in NOTIFICATION_PREFERENCES
        }
        theme = request.form.get('theme', 'light')
        session['theme'] = 'dark' if theme == 'dark' else 'light'
        flash('Preferences updated', 'success')
        return redirect(url_for('account.settings'))

    return render_template(
        'account/settings.html',
        preferences=notification_preferences(),
        theme=session.get('theme', 'light'),
    )


@account_bp.route('/terms')
@require_login
def terms():
    return render_template('account/terms.html')


@account_bp.route('/privacy')
@require_login
def privacy():
    return render_template('account/privacy.html')
