"""
Tests for login, registration and password reset
"""
from conftest import flashed

LOGIN = {'email': 'jane@opticare.lk', 'password': 'Secret1!x'}

DETAILS = {
    'name': 'Jane Perera',
    'email': 'jane@opticare.lk',
    'phone': '0771234567',
    'age': '34',
    'address': '12 Temple Road',
}


def test_auth_page_renders_tabs(client):
    response = client.get('/auth?tab=register')
    assert response.status_code == 200
    assert b'Send verification code' in response.data


def test_login_stores_session_and_redirects_home(client, backend):
    backend.on('POST', '/api/auth/login', {
        'token': 'tok', 'userId': 7, 'username': 'Jane', 'role': 'USER', 'phone': '0771234567',
    })

    response = client.post('/auth/login', data=LOGIN)

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/')
    assert backend.last('POST', '/api/auth/login')['json'] == LOGIN
    with client.session_transaction() as sess:
        assert sess['authToken'] == 'tok'
        assert sess['userEmail'] == 'jane@opticare.lk'
    assert 'Login Successful!' in flashed(client)


def test_admin_login_goes_to_dashboard(client, backend):
    backend.on('POST', '/api/auth/login', {'token': 'tok', 'userId': 1, 'username': 'Admin', 'role': 'ADMIN'})
    response = client.post('/auth/login', data=LOGIN)
    assert response.headers['Location'].endswith('/admin/dashboard')


def test_login_honours_local_redirect_only(client, backend):
    backend.on('POST', '/api/auth/login', {'token': 'tok', 'userId': 7, 'username': 'Jane', 'role': 'USER'})

    response = client.post('/auth/login', data=dict(LOGIN, redirectUrl='/cart'))
    assert response.headers['Location'].endswith('/cart')

    response = client.post('/auth/login', data=dict(LOGIN, redirectUrl='https://evil.example/'))
    assert response.headers['Location'].endswith('/')


def test_login_failure_shows_backend_message(client, backend):
    backend.fail('POST', '/api/auth/login', 401, 'Invalid credentials')
    response = client.post('/auth/login', data=LOGIN)
    assert response.status_code == 400
    assert b'Invalid credentials' in response.data


def test_login_validation_does_not_call_backend(client, backend):
    response = client.post('/auth/login', data={'email': 'bad', 'password': ''})
    assert response.status_code == 400
    assert b'Invalid email address.' in response.data
    assert backend.calls == []


def test_logout_clears_session(user_client):
    response = user_client.post('/auth/logout')
    assert response.status_code == 302
    with user_client.session_transaction() as sess:
        assert 'authToken' not in sess


def test_registration_flow(client, backend):
    backend.on('POST', '/api/auth/send-otp', {'message': 'sent'})
    backend.on('POST', '/api/auth/verify-otp', {'message': 'ok'})
    backend.on('POST', '/api/auth/register', {'message': 'created'})

    response = client.post('/auth/register', data=DETAILS)
    assert response.status_code == 302
    assert backend.last('POST', '/api/auth/send-otp')['json'] == {'email': 'jane@opticare.lk'}

    page = client.get('/auth?tab=register')
    assert b'Verify &amp; Register' in page.data

    response = client.post('/auth/register/verify', data={'otp': '123456', 'password': 'Secret1!x'})
    assert response.status_code == 302
    assert 'tab=login' in response.headers['Location']

    assert backend.last('POST', '/api/auth/verify-otp')['json'] == {'email': 'jane@opticare.lk', 'otp': '123456'}
    assert backend.last('POST', '/api/auth/register')['json'] == {
        'name': 'Jane Perera',
        'phone': '0771234567',
        'age': 34,
        'email': 'jane@opticare.lk',
        'password': 'Secret1!x',
        'address': '12 Temple Road',
    }
    with client.session_transaction() as sess:
        assert 'wizard:register' not in sess


def test_registration_rejects_weak_password(client, backend):
    backend.on('POST', '/api/auth/send-otp', {})
    client.post('/auth/register', data=DETAILS)

    response = client.post('/auth/register/verify', data={'otp': '123456', 'password': 'weakpassword'})
    assert response.status_code == 400
    assert backend.called('POST', '/api/auth/register') == []


def test_registration_details_validation(client, backend):
    response = client.post('/auth/register', data=dict(DETAILS, phone='123'))
    assert response.status_code == 400
    assert b'Phone must be at least 10 characters.' in response.data
    assert backend.calls == []



def test_resubmitted_details_send_code_to_new_email(client, backend):
    backend.on('POST', '/api/auth/send-otp', {})
    backend.on('POST', '/api/auth/verify-otp', {})
    backend.on('POST', '/api/auth/register', {})
    client.post('/auth/register', data=DETAILS)

    response = client.post('/auth/register', data=dict(DETAILS, email='jane.p@opticare.lk'))

    assert response.status_code == 302
    assert backend.last('POST', '/api/auth/send-otp')['json'] == {'email': 'jane.p@opticare.lk'}
    with client.session_transaction() as sess:
        assert sess['wizard:register']['step'] == 'otp'

    client.post('/auth/register/verify', data={'otp': '123456', 'password': 'Secret1!x'})
    assert backend.last('POST', '/api/auth/register')['json']['email'] == 'jane.p@opticare.lk'


def test_verify_without_details_goes_back_to_form(client):
    response = client.post('/auth/register/verify', data={'otp': '123456', 'password': 'Secret1!x'})
    assert response.status_code == 302
    assert 'tab=register' in response.headers['Location']


def test_forgot_password_flow(client, backend):
    backend.on('POST', '/api/auth/forgot-password', {})
    backend.on('POST', '/api/auth/verify-otp', {})
    backend.on('POST', '/api/auth/reset-password', {})

    client.post('/auth/forgot', data={'email': 'jane@opticare.lk'})
    assert b'Verify code' in client.get('/auth?tab=forgot').data

    client.post('/auth/forgot/verify', data={'otp': '654321'})
    assert b'Reset password' in client.get('/auth?tab=forgot').data

    response = client.post('/auth/forgot/reset', data={'newPassword': 'Newpass1!'})
    assert response.status_code == 302
    assert backend.last('POST', '/api/auth/reset-password')['json'] == {
        'email': 'jane@opticare.lk', 'newPassword': 'Newpass1!',
    }


def test_reset_requires_verified_otp(client, backend):
    backend.on('POST', '/api/auth/forgot-password', {})
    client.post('/auth/forgot', data={'email': 'jane@opticare.lk'})

    response = client.post('/auth/forgot/reset', data={'newPassword': 'Newpass1!'})
    assert response.status_code == 302
    assert backend.called('POST', '/api/auth/reset-password') == []


def test_failed_otp_keeps_user_on_code_step(client, backend):
    backend.on('POST', '/api/auth/forgot-password', {})
    backend.fail('POST', '/api/auth/verify-otp', 400, 'Invalid OTP')
    client.post('/auth/forgot', data={'email': 'jane@opticare.lk'})

    response = client.post('/auth/forgot/verify', data={'otp': '000000'})
    assert response.status_code == 400
    assert b'Invalid OTP' in response.data
    assert b'Verify code' in response.data
