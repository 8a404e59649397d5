"""
Dashboard aggregation and list filtering over backend JSON.

Timestamps arrive as ISO-8601 strings (usually UTC with a `Z` suffix) and are
compared in local time, the same way a browser would show them. `now` is a
naive local datetime; every function accepts it so tests can pin the clock.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from utils.api_client import as_list
from utils.loyalty import tier_progress

ORDER_STATUSES = ['pending', 'completed', 'cancelled']
TICKET_STATUSES = ['open', 'in-progress', 'resolved', 'closed']
DATE_RANGES = {'week': 7, 'month': 30, 'year': 365}


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        raw = value.strip()
        if raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _amount(item: Dict[str, Any], *keys: str) -> float:
    for key in keys:
        value = item.get(key)
        if value:
            return float(value)
    return 0.0


def _not_cancelled(order: Dict[str, Any]) -> bool:
    return order.get('status') != 'cancelled'


def weekly_liters(orders: Iterable[Dict[str, Any]], now: datetime) -> Dict[str, list]:
    """Liters sold per day for the last seven days, oldest first."""
    days = [start_of_day(now) - timedelta(days=6 - i) for i in range(7)]
    totals = [0.0] * 7

    for order in orders:
        if not _not_cancelled(order):
            continue
        created = parse_timestamp(order.get('createdAt'))
        if created is None:
            continue
        offset = (start_of_day(created) - days[0]).days
        if 0 <= offset < 7:
            totals[offset] += float(order.get('liters') or 0)

    return {
        'labels': [d.strftime('%a') for d in days],
        'data': totals,
    }


def admin_dashboard_stats(customers: List[Dict[str, Any]], orders_payload: Any,
                          fuel_prices: List[Dict[str, Any]], tickets: Any,
                          now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now()
    today = start_of_day(now)

    orders = as_list(orders_payload, 'orders', 'data')
    tickets = tickets if isinstance(tickets, list) else []
    customers = customers or []

    def created_today(item):
        created = parse_timestamp(item.get('createdAt'))
        return created is not None and created >= today

    todays_orders = [o for o in orders if created_today(o) and _not_cancelled(o)]

    total = orders_payload.get('total') if isinstance(orders_payload, dict) else None

    return {
        'total_customers': len(customers),
        'total_transactions': total or len(orders),
        'recent_transactions': orders[:5],
        'recent_customers': customers[:5],
        'fuel_prices': fuel_prices or [],
        'total_points_distributed': sum(float(o.get('pointsEarned') or 0) for o in orders),
        'transactions_today': len(todays_orders),
        'revenue_today': sum(_amount(o, 'finalAmount', 'totalAmount') for o in todays_orders),
        'new_customers_today': sum(1 for c in customers if created_today(c)),
        'weekly_data': weekly_liters(orders, now),
        'recent_tickets': tickets[:3],
    }


def customer_dashboard_stats(user: Optional[Dict[str, Any]], transactions: List[Dict[str, Any]],
                             fuel_prices: List[Dict[str, Any]]) -> Dict[str, Any]:
    user = user or {}
    transactions = transactions or []

    total_earned = sum(float(t.get('pointsEarned') or 0) for t in transactions)
    total_points = total_earned or float(user.get('totalPoints') or 0)

    return {
        'my_transactions': transactions,
        'my_points': user.get('availablePoints') or 0,
        'my_total_points': total_points,
        'total_transactions': len(transactions),
        'total_spent': sum(float(t.get('totalAmount') or 0) for t in transactions),
        'fuel_prices': fuel_prices or [],
        'tier': tier_progress(total_points),
    }


def in_date_range(created_at: Any, date_range: str, now: Optional[datetime] = None) -> bool:
    if date_range in (None, '', 'all'):
        return True
    now = now or datetime.now()
    created = parse_timestamp(created_at)
    if created is None:
        return False
    if date_range == 'today':
        return created >= start_of_day(now)
    if date_range in DATE_RANGES:
        return created >= now - timedelta(days=DATE_RANGES[date_range])
    return True


def filter_orders(orders: List[Dict[str, Any]], status: str = 'all', date_range: str = 'all',
                  now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    return [
        o for o in orders
        if (status in (None, '', 'all') or o.get('status') == status)
        and in_date_range(o.get('createdAt'), date_range, now)
    ]


def order_status_counts(orders: List[Dict[str, Any]]) -> Dict[str, int]:
    return {s: sum(1 for o in orders if o.get('status') == s) for s in ORDER_STATUSES}


def completed_revenue(orders: List[Dict[str, Any]]) -> float:
    return sum(float(o.get('totalPrice') or 0) for o in orders if o.get('status') == 'completed')


def ticket_status_counts(tickets: List[Dict[str, Any]]) -> Dict[str, int]:
    return {s: sum(1 for t in tickets if t.get('status') == s) for s in TICKET_STATUSES}


def search_tickets(tickets: List[Dict[str, Any]], query: str) -> List[Dict[str, Any]]:
    if not query:
        return list(tickets)
    q = query.lower()

    def matches(ticket):
        user = ticket.get('user')
        if not isinstance(user, dict):
            user = {}
        return any(q in str(v or '').lower() for v in (
            ticket.get('subject'), user.get('name'), user.get('email')))

    return [t for t in tickets if matches(t)]


def search_customers(customers: List[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    if not term:
        return list(customers)
    t = term.lower()
    return [
        c for c in customers
        if t in (c.get('name') or '').lower()
        or t in (c.get('email') or '').lower()
        or term in (c.get('phone') or '')
    ]


def customer_activity(customers: List[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, int]:
    now = now or datetime.now()
    active_today = 0
    new_this_month = 0
    for c in customers:
        last_active = parse_timestamp(c.get('lastActive') or c.get('createdAt'))
        if last_active and last_active.date() == now.date():
            active_today += 1
        created = parse_timestamp(c.get('createdAt'))
        if created and (created.year, created.month) == (now.year, now.month):
            new_this_month += 1
    return {'active_today': active_today, 'new_this_month': new_this_month}


def search_transactions(transactions: List[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    t = (term or '').lower()
    return [
        tx for tx in transactions
        if t in (tx.get('receiptNumber') or '').lower()
        or t in (tx.get('fuelType') or '').lower()
    ]


def filter_notifications(notifications: List[Dict[str, Any]], which: str = 'all') -> List[Dict[str, Any]]:
    if which == 'unread':
        return [n for n in notifications if not n.get('read')]
    if which == 'read':
        return [n for n in notifications if n.get('read')]
    return list(notifications)


def referral_transactions(transactions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        t for t in transactions
        if t.get('type') == 'referral' or 'referral' in (t.get('description') or '').lower()
    ]


def referral_earnings(transactions: List[Dict[str, Any]]) -> float:
    return sum(float(t.get('pointsEarned') or 0) for t in referral_transactions(transactions))


def average_fuel_price(prices: List[Dict[str, Any]]) -> float:
    if not prices:
        return 0.0
    return sum(float(p.get('pricePerLiter') or 0) for p in prices) / len(prices)
