"""
Tests for the login and one-time-code request limits
"""
import pytest

from opticare.opticare_app import create_app

from conftest import TEST_CONFIG, log_in

ALLOWED = 5

DETAILS = {
    'name': 'Jane Perera',
    'email': 'jane@opticare.lk',
    'phone': '0771234567',
    'age': '34',
    'address': '12 Temple Road',
}

EXTERNAL = '/admin/eyetest/external'
PERSONAL = {'name': 'Walk In', 'email': 'walkin@opticare.lk', 'phone': '0771234567', 'age': '34', 'address': ''}


@pytest.fixture
def limited_client(backend):
    app = create_app(dict(
        TEST_CONFIG,
        RATELIMIT_ENABLED=True,
        OTP_RATE_LIMIT=f'{ALLOWED} per minute',
        LOGIN_RATE_LIMIT=f'{ALLOWED} per minute',
    ))
    return app.test_client()


def post_repeatedly(client, url, data, times):
    return [client.post(url, data=data).status_code for _ in range(times)]


def test_login_attempts_are_limited(limited_client, backend):
    backend.fail('POST', '/api/auth/login', 401, 'Invalid credentials')

    statuses = post_repeatedly(limited_client, '/auth/login',
                               {'email': 'jane@opticare.lk', 'password': 'Wrong1!pass'}, ALLOWED + 1)

    assert statuses == [400] * ALLOWED + [429]
    assert len(backend.called('POST', '/api/auth/login')) == ALLOWED


def test_registration_code_guesses_are_limited(limited_client, backend):
    backend.on('POST', '/api/auth/send-otp', {})
    backend.fail('POST', '/api/auth/verify-otp', 400, 'Invalid OTP')
    limited_client.post('/auth/register', data=DETAILS)

    statuses = post_repeatedly(limited_client, '/auth/register/verify',
                               {'otp': '000000', 'password': 'Secret1!x'}, ALLOWED + 1)

    assert statuses == [400] * ALLOWED + [429]
    assert len(backend.called('POST', '/api/auth/verify-otp')) == ALLOWED


def test_forgot_password_code_guesses_are_limited(limited_client, backend):
    backend.on('POST', '/api/auth/forgot-password', {})
    backend.fail('POST', '/api/auth/verify-otp', 400, 'Invalid OTP')
    limited_client.post('/auth/forgot', data={'email': 'jane@opticare.lk'})

    statuses = post_repeatedly(limited_client, '/auth/forgot/verify', {'otp': '000000'}, ALLOWED + 1)

    assert statuses == [400] * ALLOWED + [429]
    assert len(backend.called('POST', '/api/auth/verify-otp')) == ALLOWED


def test_profile_code_guesses_are_limited(limited_client, backend):
    backend.on('POST', '/api/auth/send-otp', {})
    backend.fail('POST', '/api/auth/verify-otp', 400, 'Invalid OTP')
    log_in(limited_client)
    limited_client.post('/profile/password/send-otp')

    statuses = post_repeatedly(limited_client, '/profile/password/verify', {'otp': '000000'}, ALLOWED + 1)

    assert statuses == [400] * ALLOWED + [429]
    assert len(backend.called('POST', '/api/auth/verify-otp')) == ALLOWED


def test_external_code_resends_are_limited(limited_client, backend):
    backend.on('POST', '/api/eye-tests/external/send-otp', {})
    log_in(limited_client, role='ADMIN', name='Admin User', email='admin@opticare.lk', userId='a1')
    limited_client.post(EXTERNAL, data=PERSONAL)

    statuses = post_repeatedly(limited_client, EXTERNAL, {'action': 'resend'}, ALLOWED)

    assert statuses == [302] * (ALLOWED - 1) + [429]
    assert len(backend.called('POST', '/api/eye-tests/external/send-otp')) == ALLOWED


def test_external_measurement_steps_are_not_limited(limited_client, backend):
    backend.on('POST', '/api/eye-tests/external/send-otp', {})
    backend.on('POST', '/api/eye-tests/external/verify-otp', {})
    log_in(limited_client, role='ADMIN', name='Admin User', email='admin@opticare.lk', userId='a1')
    limited_client.post(EXTERNAL, data=PERSONAL)
    limited_client.post(EXTERNAL, data={'otp': '123456'})

    statuses = post_repeatedly(limited_client, EXTERNAL, {'dvRightEye.sph': 'abc'}, ALLOWED * 2)

    assert statuses == [400] * (ALLOWED * 2)
