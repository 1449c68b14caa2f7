"""
Cart Service
Shopping cart of the logged-in customer and pay-on-delivery callback requests
"""
import logging

from opticare.core.api_client import ApiClient
from opticare.core.session import clear_auth_token

logger = logging.getLogger(__name__)


def cart_total(cart):
    """Total shown for a cart; falls back to summing the items"""
    if not cart:
        return 0
    if cart.get('totalPrice') is not None:
        return cart['totalPrice']
    return sum((item.get('price') or 0) * (item.get('quantity') or 0) for item in cart.get('items') or [])


class CartService:
    """Service for the Cart component

    A 401 on any cart call means the stored token is no longer accepted, so
    the session forgets it.
    """

    def __init__(self, client=None):
        self.client = client or ApiClient('/api', on_unauthorized=clear_auth_token)

    def get_cart(self):
        return self.client.get('/cart/me')

    def add_to_cart(self, item):
        payload = {
            'productId': item.get('productId'),
            'productName': item.get('productName'),
            'imageUrl': item.get('imageUrl'),
            'price': item.get('price'),
            'quantity': 1,
        }
        return self.client.post('/cart/me/items', json=payload)

    def update_cart_item(self, product_id, quantity):
        return self.client.put(f'/cart/me/items/{product_id}', params={'quantity': quantity})

    def remove_from_cart(self, product_id):
        return self.client.delete(f'/cart/me/items/{product_id}')

    def clear_cart(self):
        return self.client.delete('/cart/me')

    def change_quantity(self, product_id, quantity):
        """Stepper semantics: anything below one removes the item"""
        if quantity < 1:
            return self.remove_from_cart(product_id)
        return self.update_cart_item(product_id, quantity)


class CallbackService:
    """Customer side of callback requests"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/callbacks')

    def request_callback(self, name, phone, address):
        result = self.client.post('/request', json={'name': name, 'phone': phone, 'address': address})
        logger.info(f'Callback requested by {name}')
        return result
