"""
HTTP client for the FuelMate REST backend.

Every call goes through ApiClient.request(), which attaches the bearer token
held in the login session and turns HTTP and network failures into ApiError.
The backend reports problems as {"message": "..."}; that text is what the
user sees, with a per-call fallback when it is missing.
"""

import logging
from typing import Any, Optional

import requests
from flask import g, session

from config import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A backend call failed. `message` is safe to show to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class SessionExpired(Exception):
    """The backend rejected the session token (HTTP 401 on an authenticated call).

    Handled once at app level, which logs the user out.
    """

    def __init__(self, message: str = 'Session expired, please log in again'):
        super().__init__(message)
        self.message = message


class ApiClient:
    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = 15.0, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.http = http or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def request(self, method: str, path: str, *, params: Optional[dict] = None,
                json: Any = None, fallback: str = 'Request failed') -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ''}

        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self.http.request(
                method,
                self._url(path),
                params=params or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(fallback) from e

        payload = _decode(response)

        if response.status_code >= 400:
            message = fallback
            if isinstance(payload, dict) and payload.get('message'):
                message = str(payload['message'])
            logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            if response.status_code == 401 and self.token:
                raise SessionExpired()
            raise ApiError(message, status_code=response.status_code, payload=payload)

        return payload

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request('PUT', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)


def _decode(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def as_list(payload: Any, *keys: str) -> list:
    """Return the list a backend response carries, bare or wrapped under one of `keys`."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys or ('data',):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def unwrap(payload: Any, *keys: str) -> Any:
    """Return the object nested under the first present key, else the payload itself."""
    if isinstance(payload, dict):
        for key in keys:
            if payload.get(key):
                return payload[key]
    return payload


def get_api_client() -> ApiClient:
    """Client for the current request, authenticated with the session token."""
    if 'api_client' not in g:
        g.api_client = ApiClient(
            config.API_URL,
            token=session.get('token'),
            timeout=config.API_TIMEOUT,
        )
    return g.api_client
