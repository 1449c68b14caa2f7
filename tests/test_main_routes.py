"""
Tests for the public landing pages
"""
from conftest import log_in


def test_home_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'See the world clearly' in response.data
    assert b'Login' in response.data


def test_home_shows_admin_link_for_admins(client):
    log_in(client, role='ADMIN', name='Admin User')
    response = client.get('/')
    assert b'/admin/dashboard' in response.data
    assert b'Admin User' in response.data


def test_eye_test_page_lists_store_location(client):
    response = client.get('/eyetest')
    assert response.status_code == 200
    assert b'Secunderabad' in response.data


def test_health(client):
    data = client.get('/health').get_json()
    assert data['status'] == 'ok'
    assert data['service'] == 'opticare-web'


def test_unknown_page_renders_not_found(client):
    response = client.get('/no-such-page')
    assert response.status_code == 404
    assert b'Page not found' in response.data
