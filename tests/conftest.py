"""
Shared fixtures: app factory, test client and a fake backend API
"""
import json
import time
from urllib.parse import urlsplit

import jwt
import pytest
import requests

from opticare.opticare_app import create_app

API_BASE_URL = 'http://backend.test'

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret',
    'WTF_CSRF_ENABLED': False,
    'RATELIMIT_ENABLED': False,
    'MONITOR_ENABLED': False,
    'API_BASE_URL': API_BASE_URL,
}


def make_response(status_code=200, body=None):
    response = requests.Response()
    response.status_code = status_code
    response.reason = 'OK' if status_code < 400 else 'Error'
    response.url = API_BASE_URL
    response.headers['Content-Type'] = 'application/json'
    response._content = b'' if body is None else json.dumps(body).encode()
    return response


class FakeBackend:
    """Canned JSON answers per (method, path); every call is recorded"""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, body=None, status=200):
        """Register an answer; body may be a callable taking the recorded call"""
        self.routes[(method.upper(), path)] = (status, body)
        return self

    def fail(self, method, path, status=500, message='Server error'):
        return self.on(method, path, {'message': message}, status)

    def handle(self, method, url, params=None, json=None, headers=None, **kwargs):
        path = urlsplit(url).path
        call = {
            'method': method.upper(),
            'path': path,
            'params': params or {},
            'json': json,
            'headers': headers or {},
        }
        self.calls.append(call)

        if (call['method'], path) not in self.routes:
            return make_response(404, {'message': f'No fake route for {method} {path}'})
        status, body = self.routes[(call['method'], path)]
        if callable(body):
            body = body(call)
        return make_response(status, body)

    def called(self, method, path):
        return [call for call in self.calls if call['method'] == method.upper() and call['path'] == path]

    def last(self, method, path):
        calls = self.called(method, path)
        assert calls, f'{method} {path} was not called'
        return calls[-1]


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()

    def fake_request(session, method, url, **kwargs):
        return fake.handle(method, url, **kwargs)

    monkeypatch.setattr(requests.Session, 'request', fake_request)
    return fake


@pytest.fixture
def app(backend):
    app = create_app(TEST_CONFIG)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_token(role='USER', expires_in=3600, secret='backend-signing-secret-for-tests-only'):
    claims = {'sub': 'jane@opticare.lk', 'role': role, 'exp': int(time.time()) + expires_in}
    return jwt.encode(claims, secret, algorithm='HS256')


def log_in(client, role='USER', token=None, **fields):
    """Put a logged-in user into the client's session"""
    with client.session_transaction() as sess:
        sess['authToken'] = token or make_token(role)
        sess['userId'] = fields.get('userId', 'u1')
        sess['userEmail'] = fields.get('email', 'jane@opticare.lk')
        sess['userName'] = fields.get('name', 'Jane Perera')
        sess['userRole'] = role
        sess['userPhone'] = fields.get('phone', '0771234567')


@pytest.fixture
def user_client(client):
    log_in(client)
    return client


@pytest.fixture
def admin_client(client):
    log_in(client, role='ADMIN', name='Admin User', email='admin@opticare.lk', userId='a1')
    return client


def flashed(client):
    """Toast titles queued in the session"""
    with client.session_transaction() as sess:
        return [message['title'] for _, message in sess.get('_flashes', [])]
