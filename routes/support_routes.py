"""
Customer support routes — FuelMate Portal.

Routes:
    GET  /app/support          - My tickets + new ticket form
    POST /app/support          - Open a ticket
    GET  /app/support/<id>     - Ticket thread
    POST /app/support/<id>/reply - Add a message to the thread
"""

from flask import Blueprint, render_template, request, redirect, url_for, flash

from routes.auth_routes import require_login
from utils.api_client import ApiError, as_list, unwrap

support_bp = Blueprint('support', __name__, url_prefix='/app/support')

CATEGORIES = ['general', 'order', 'payment', 'rewards', 'account', 'technical']

FAQ = [
    ("How do I collect my prepaid fuel?",
     "Open the order once it is paid and show its QR code to the attendant at the pump."),
    ("When do I earn points?",
     "Every purchase earns you points. You can redeem these points for discounts on future orders."),
    ("Can I cancel an order?",
     "Contact support to cancel a pending order."),
]


@support_bp.route('/', methods=['GET', 'POST'])
@require_login
def index():
    from utils.fuel_api import get_api
    api = get_api()

    form = {
        'subject': request.form.get('subject', '').strip(),
        'message': request.form.get('message', '').strip(),
        'category': request.form.get('category', 'general'),
    }

    if request.method == 'POST':
        if not form['subject'] or not form['message']:
            flash('Please fill in all fields', 'error')
        else:
            try:
                api.support.create(form)
                flash('Support ticket created successfully!', 'success')
                return redirect(url_for('support.index'))
            except ApiError as e:
                flash(e.message, 'error')

    tickets = []
    try:
        tickets = as_list(api.support.mine(), 'tickets', 'data')
    except ApiError:
        flash('Failed to fetch support tickets', 'error')

    return render_template('support/index.html', tickets=tickets, form=form,
                           categories=CATEGORIES, faq=FAQ)


@support_bp.route('/<ticket_id>')
@require_login
def ticket(ticket_id: str):
    from utils.fuel_api import get_api
    try:
        ticket = unwrap(get_api().support.get(ticket_id), 'ticket', 'data')
    except ApiError as e:
        flash(e.message, 'error')
        return redirect(url_for('support.index'))

    return render_template('support/ticket.html', ticket=ticket or {}, ticket_id=ticket_id)


@support_bp.route('/<ticket_id>/reply', methods=['POST'])
@require_login
def reply(ticket_id: str):
    from utils.fuel_api import get_api
    message = request.form.get('message', '').strip()
    if message:
        try:
            get_api().support.reply(ticket_id, message)
            flash('Reply sent successfully', 'success')
        except ApiError:
            flash('Failed to send reply', 'error')
    return redirect(url_for('support.ticket', ticket_id=ticket_id))
