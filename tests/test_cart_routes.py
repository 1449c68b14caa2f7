"""
Tests for the cart and pay-on-delivery callbacks
"""
from opticare.components.cart.service import cart_total

from conftest import flashed

CART = {
    'items': [
        {'productId': 'p1', 'productName': 'Aviator Classic', 'price': 4500, 'quantity': 2},
    ],
    'totalPrice': 9000,
}


def test_cart_total_falls_back_to_items():
    assert cart_total(None) == 0
    assert cart_total(CART) == 9000
    assert cart_total({'items': [{'price': 100, 'quantity': 3}]}) == 300


def test_anonymous_cart_prompts_login(client, backend):
    response = client.get('/cart')
    assert response.status_code == 200
    assert b'Log in' in response.data
    assert backend.calls == []


def test_cart_lists_items(user_client, backend):
    backend.on('GET', '/api/cart/me', CART)
    response = user_client.get('/cart')
    assert b'Aviator Classic' in response.data
    assert 'Total: ₹9000'.encode() in response.data
    assert backend.last('GET', '/api/cart/me')['headers']['Authorization'].startswith('Bearer ')


def test_rejected_token_is_forgotten(user_client, backend):
    backend.fail('GET', '/api/cart/me', 401, 'Token expired')
    response = user_client.get('/cart')
    assert response.status_code == 200
    with user_client.session_transaction() as sess:
        assert 'authToken' not in sess


def test_add_to_cart_requires_login(client, backend):
    response = client.post('/cart/add', data={'productId': 'p1', 'next': '/products'})
    assert response.headers['Location'].endswith('/products')
    assert 'Please login to add to cart' in flashed(client)
    assert backend.calls == []


def test_add_to_cart(user_client, backend):
    backend.on('POST', '/api/cart/me/items', CART)
    response = user_client.post('/cart/add', data={
        'productId': 'p1', 'productName': 'Aviator Classic', 'imageUrl': '', 'price': '4500', 'next': '/products/p1',
    })
    assert response.headers['Location'].endswith('/products/p1')
    assert backend.last('POST', '/api/cart/me/items')['json'] == {
        'productId': 'p1', 'productName': 'Aviator Classic', 'imageUrl': '', 'price': 4500.0, 'quantity': 1,
    }


def test_quantity_stepper(user_client, backend):
    backend.on('PUT', '/api/cart/me/items/p1', CART)
    backend.on('DELETE', '/api/cart/me/items/p1', None)

    user_client.post('/cart/items/p1/quantity', data={'quantity': '3'})
    assert backend.last('PUT', '/api/cart/me/items/p1')['params'] == {'quantity': 3}

    user_client.post('/cart/items/p1/quantity', data={'quantity': '0'})
    assert backend.called('DELETE', '/api/cart/me/items/p1')
    assert 'Item Removed' in flashed(user_client)


def test_clear_cart(user_client, backend):
    backend.on('DELETE', '/api/cart/me', None)
    user_client.post('/cart/clear')
    assert backend.called('DELETE', '/api/cart/me')


def test_request_callback(user_client, backend):
    backend.on('POST', '/api/callbacks/request', {'id': 'c1'})
    response = user_client.post('/cart/callback', data={
        'name': 'Jane Perera', 'phone': '0771234567', 'address': '12 Temple Road, Colombo',
    })
    assert response.status_code == 302
    assert backend.last('POST', '/api/callbacks/request')['json']['phone'] == '0771234567'


def test_invalid_callback_opens_form(user_client, backend):
    backend.on('GET', '/api/cart/me', CART)
    response = user_client.post('/cart/callback', data={'name': 'J', 'phone': '1', 'address': 'x'})
    assert response.status_code == 400
    assert b'Please enter a complete address.' in response.data
    assert b'<details class="card callback" open>' in response.data
    assert backend.called('POST', '/api/callbacks/request') == []
