"""
Tests for the storefront catalog and reviews
"""
from werkzeug.datastructures import MultiDict

from opticare.components.catalog.service import CatalogFilters

from conftest import flashed

PRODUCT = {
    'id': 'p1',
    'name': 'Aviator Classic',
    'description': 'Gold metal aviator frame',
    'price': 4500,
    'category': 'Classic',
    'specstype': 'Sunglasses',
    'gender': 'Unisex',
    'stock': 5,
    'averageRating': 4.5,
    'tags': ['metal'],
    'imageUrl': 'https://img.example.com/aviator.png',
}


def test_filters_from_query_string():
    args = MultiDict([
        ('search', ' aviator '),
        ('category', 'Classic'),
        ('category', 'Sport'),
        ('tags', ''),
        ('minPrice', '1000.0'),
        ('minRating', '9'),
        ('inStock', 'on'),
        ('sort', 'bogus'),
        ('page', '2'),
    ])
    filters = CatalogFilters.from_args(args)
    params = filters.to_params(12)

    assert params == {
        'search': 'aviator',
        'minPrice': 1000,
        'maxPrice': 25000,
        'minRating': 5,
        'inStock': 'true',
        'page': 2,
        'size': 12,
        'sort': 'averageRating,desc',
        'category': 'Classic,Sport',
    }
    assert filters.query_args(page=3)['page'] == 3


def test_default_filters_leave_out_unset_values():
    params = CatalogFilters().to_params(12)
    assert 'search' not in params
    assert 'minRating' not in params
    assert params['inStock'] == 'false'


def test_product_list_passes_filters(client, backend):
    backend.on('GET', '/api/products/filterPage', {'content': [PRODUCT], 'totalPages': 2, 'totalElements': 13})

    response = client.get('/products?category=Classic&gender=Men&page=1')

    assert response.status_code == 200
    assert b'Aviator Classic' in response.data
    assert b'13 products found' in response.data
    params = backend.last('GET', '/api/products/filterPage')['params']
    assert params['category'] == 'Classic'
    assert params['gender'] == 'Men'
    assert params['page'] == 1


def test_product_list_survives_backend_failure(client, backend):
    backend.fail('GET', '/api/products/filterPage')
    response = client.get('/products')
    assert response.status_code == 200
    assert b'Failed to load products' in response.data
    assert b'No eyeframes match' in response.data


def test_legacy_listing_redirects(client):
    response = client.get('/products/allItems?category=Sport')
    assert response.status_code == 302
    assert '/products?category=Sport' in response.headers['Location']


def test_product_detail_with_reviews(client, backend):
    backend.on('GET', '/api/products/p1', PRODUCT)
    backend.on('GET', '/api/reviews/product/p1', [
        {'id': 'r1', 'userId': 'u2', 'username': 'Kamal', 'rating': 4, 'comment': 'Very comfortable'},
        {'id': 'r1', 'userId': 'u2', 'username': 'Kamal', 'rating': 4, 'comment': 'Very comfortable'},
    ])

    response = client.get('/products/p1')

    assert response.status_code == 200
    assert b'Reviews (1)' in response.data
    assert b'Log in' in response.data


def test_missing_product_is_not_found(client, backend):
    backend.fail('GET', '/api/products/nope', 404, 'Product not found')
    assert client.get('/products/nope').status_code == 404


def test_add_review_requires_login(client, backend):
    response = client.post('/products/p1/reviews', data={'rating': '5', 'comment': 'Great frames!'})
    assert response.status_code == 302
    assert '/auth' in response.headers['Location']
    assert backend.calls == []


def test_add_review(user_client, backend):
    backend.on('POST', '/api/reviews', {'id': 'r9'})

    response = user_client.post('/products/p1/reviews', data={'rating': '5', 'comment': 'Great frames, love them'})

    assert response.status_code == 302
    assert backend.last('POST', '/api/reviews')['json'] == {
        'productId': 'p1', 'rating': 5, 'comment': 'Great frames, love them',
    }
    assert 'Review added!' in flashed(user_client)


def test_short_review_is_rejected(user_client, backend):
    backend.on('GET', '/api/products/p1', PRODUCT)
    backend.on('GET', '/api/reviews/product/p1', [])

    response = user_client.post('/products/p1/reviews', data={'rating': '5', 'comment': 'short'})

    assert response.status_code == 400
    assert b'Comment must be between 10 and 1000 characters.' in response.data
    assert backend.called('POST', '/api/reviews') == []


def test_duplicate_review_shows_backend_message(user_client, backend):
    backend.on('GET', '/api/products/p1', PRODUCT)
    backend.on('GET', '/api/reviews/product/p1', [])
    backend.fail('POST', '/api/reviews', 409, 'You have already reviewed this product')

    response = user_client.post('/products/p1/reviews', data={'rating': '4', 'comment': 'Nice frames overall'})

    assert response.status_code == 400
    assert b'You have already reviewed this product' in response.data


def test_delete_own_review(user_client, backend):
    backend.on('DELETE', '/api/reviews/r1', None)
    response = user_client.post('/products/p1/reviews/r1/delete')
    assert response.headers['Location'].endswith('/products/p1')
    assert backend.called('DELETE', '/api/reviews/r1')
