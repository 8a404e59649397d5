"""
Login state kept in the Flask session cookie.

The backend answers /auth/login and /auth/register with the user's fields
plus a `token`; the token authenticates every later API call and the rest
is the cached user shown in the navigation and dashboards.
"""

from typing import Any, Dict, Optional

from flask import session


def login_user(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(payload or {})
    token = data.pop('token', None)
    if not token:
        raise ValueError('Login response did not include a token')
    session['token'] = token
    session['user'] = data
    return data


def logout_user() -> None:
    session.pop('token', None)
    session.pop('user', None)
    session.pop('scan_result', None)


def current_user() -> Optional[Dict[str, Any]]:
    if not session.get('token'):
        return None
    return session.get('user') or {}


def is_logged_in() -> bool:
    return bool(session.get('token'))


def is_admin() -> bool:
    user = current_user()
    return bool(user) and user.get('role') == 'admin'


def update_current_user(fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    user = dict(session.get('user') or {})
    if isinstance(fields, dict):
        user.update({k: v for k, v in fields.items() if k != 'token'})
    session['user'] = user
    return user
