"""
REST client for the OptiCare backend API

Every component service talks to the backend through an ApiClient rooted at
one base path (``/api/products``, ``/api/admin/users``, ...). The client adds
the bearer token of the logged-in user, drops empty query parameters and turns
non-2xx responses into ApiError.
"""
import logging

import requests
from flask import current_app, has_app_context, has_request_context, session

from opticare.config.settings import OptiCareConfig

logger = logging.getLogger(__name__)

TOKEN_SESSION_KEY = 'authToken'


class ApiError(Exception):
    """Failed call to the backend API"""

    def __init__(self, status_code, message, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    @property
    def is_not_found(self):
        return self.status_code == 404

    @property
    def is_conflict(self):
        return self.status_code == 409

    @property
    def is_unauthorized(self):
        return self.status_code == 401

    def __str__(self):
        return self.message


def session_token():
    """Bearer token of the current browser session, if any"""
    if not has_request_context():
        return None
    return session.get(TOKEN_SESSION_KEY)


def _error_message(response, payload):
    if isinstance(payload, dict):
        for key in ('message', 'error'):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return f'HTTP {response.status_code}'


def _decode_body(response):
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Thin JSON client for one backend resource"""

    def __init__(self, base_path, base_url=None, timeout=None, http=None,
                 token_provider=session_token, on_unauthorized=None):
        self.base_path = base_path
        self._base_url = base_url
        self._timeout = timeout
        self.http = http or requests.Session()
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized

    @property
    def base_url(self):
        if self._base_url:
            return self._base_url
        if has_app_context():
            return current_app.config.get('API_BASE_URL', OptiCareConfig.API_BASE_URL)
        return OptiCareConfig.API_BASE_URL

    @property
    def timeout(self):
        if self._timeout is not None:
            return self._timeout
        if has_app_context():
            return current_app.config.get('API_TIMEOUT_SECONDS', OptiCareConfig.API_TIMEOUT_SECONDS)
        return OptiCareConfig.API_TIMEOUT_SECONDS

    def url_for(self, path=''):
        return self.base_url.rstrip('/') + self.base_path + path

    def _headers(self):
        headers = {'Content-Type': 'application/json', 'Accept': 'application/json'}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    def request(self, method, path='', params=None, json=None):
        """Send a request and return the decoded JSON body

        Raises ApiError for transport failures and non-2xx responses.
        """
        url = self.url_for(path)
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        try:
            response = self.http.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f'{method} {url} failed: {e}')
            raise ApiError(None, 'Could not reach the OptiCare server. Please try again later.') from e

        payload = _decode_body(response)
        if response.ok:
            return payload

        message = _error_message(response, payload)
        logger.warning(f'{method} {url} -> HTTP {response.status_code}: {message}')

        if response.status_code == 401 and self.on_unauthorized:
            self.on_unauthorized()

        raise ApiError(response.status_code, message, payload)

    def get(self, path='', params=None):
        return self.request('GET', path, params=params)

    def post(self, path='', json=None, params=None):
        return self.request('POST', path, params=params, json=json)

    def put(self, path='', json=None, params=None):
        return self.request('PUT', path, params=params, json=json)

    def patch(self, path='', json=None, params=None):
        return self.request('PATCH', path, params=params, json=json)

    def delete(self, path='', params=None):
        return self.request('DELETE', path, params=params)
