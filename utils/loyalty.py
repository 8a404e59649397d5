"""
Loyalty arithmetic shown to users before the backend confirms it.

The backend owns the points ledger; these helpers only reproduce its
published rules so forms can preview totals, points and tiers.
"""

import math
import re
from typing import Any, Dict, List, Optional

# One point per 100 currency units spent
RUPEES_PER_POINT = 100

TIERS = [
    {'name': 'Silver', 'min': 0},
    {'name': 'Gold', 'min': 1000},
    {'name': 'Platinum', 'min': 2500},
]

PAYMENT_METHODS = ['upi', 'card', 'netbanking', 'wallet', 'cash']


def parse_number(raw: Any, field: str = 'value') -> float:
    if raw is None or str(raw).strip() == '':
        raise ValueError(f'{field} is required')
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise ValueError(f'{field} must be a number')
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f'{field} must be a number')
    return value


def parse_price(raw: Any) -> float:
    return parse_number(raw, 'Price')


def parse_liters(raw: Any) -> float:
    liters = parse_number(raw, 'Liters')
    if liters <= 0:
        raise ValueError('Liters must be greater than zero')
    return liters


def find_fuel_price(fuel_prices: List[Dict[str, Any]], fuel_type: Optional[str]) -> Optional[Dict[str, Any]]:
    for price in fuel_prices or []:
        if price.get('fuelType') == fuel_type:
            return price
    return None


def price_per_liter(fuel_prices: List[Dict[str, Any]], fuel_type: Optional[str]) -> float:
    price = find_fuel_price(fuel_prices, fuel_type)
    return float(price.get('pricePerLiter') or 0) if price else 0.0


def quote_order(fuel_prices: List[Dict[str, Any]], fuel_type: Optional[str], liters: Any) -> float:
    """Total for a prepaid order; 0 for an unknown fuel type or missing quantity."""
    try:
        quantity = float(liters)
    except (TypeError, ValueError):
        return 0.0
    return quantity * price_per_liter(fuel_prices, fuel_type)


def points_for_amount(amount: float, double_points: bool = False) -> int:
    points = math.floor(amount / RUPEES_PER_POINT)
    return points * 2 if double_points else points


def transaction_quote(fuel_prices: List[Dict[str, Any]], fuel_type: Optional[str], liters: Any,
                      double_points: bool = False, cashback: float = 0) -> Dict[str, float]:
    if find_fuel_price(fuel_prices, fuel_type) is None or not liters:
        return {'amount': 0.0, 'points': 0, 'cashback': 0.0, 'final_amount': 0.0}

    amount = quote_order(fuel_prices, fuel_type, liters)
    cashback = float(cashback or 0)
    return {
        'amount': amount,
        'points': points_for_amount(amount, double_points),
        'cashback': cashback,
        'final_amount': max(0.0, amount - cashback),
    }


def tier_progress(points: float) -> Dict[str, Any]:
    current_idx = 0
    for i, tier in enumerate(TIERS):
        if points >= tier['min']:
            current_idx = i

    current = TIERS[current_idx]
    next_tier = TIERS[current_idx + 1] if current_idx + 1 < len(TIERS) else None

    if next_tier:
        points_to_next = next_tier['min'] - points
        progress = (points - current['min']) / (next_tier['min'] - current['min']) * 100
    else:
        points_to_next = 0
        progress = 100.0

    return {
        'tier': current['name'],
        'next_tier': next_tier['name'] if next_tier else None,
        'points_to_next': points_to_next,
        'progress': progress,
    }


def validate_redemption(raw_points: Any, available_points: Any) -> int:
    """Points to redeem as an int, truncating any fraction ('10.5' -> 10).

    Cashback is one currency unit per point.
    """
    match = re.match(r'\s*([+-]?\d+)', str(raw_points if raw_points is not None else ''))
    if not match:
        raise ValueError('Please enter valid points')
    points = int(match.group(1))
    if points <= 0:
        raise ValueError('Please enter valid points')
    if points > (available_points or 0):
        raise ValueError('Insufficient points')
    return points


def referral_code(user: Optional[Dict[str, Any]]) -> str:
    user = user or {}
    if user.get('referralCode'):
        return user['referralCode']
    return f"FUEL-{str(user.get('_id', ''))[-4:].upper()}"
